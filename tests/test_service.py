from pathlib import Path

from PIL import Image
import pytest

from mediaroll.config import AppConfig, load_config
from mediaroll.errors import InvalidArgumentError, StoreUnavailableError, UnsupportedOptionError
from mediaroll.service import MediaLibraryService

from conftest import StubThumbnails, record_id_from_uri


def _cfg(tmp_path: Path, **overrides) -> AppConfig:
    base = {
        "db_path": str(tmp_path / "cache" / "media.sqlite3"),
        "thumbnails_dir": str(tmp_path / "cache" / "thumbnails"),
        "pid_path": str(tmp_path / "cache" / "bridge.pid"),
        "workers": 2,
        "library": {
            "pictures_dir": str(tmp_path / "Pictures"),
            "movies_dir": str(tmp_path / "Movies"),
        },
    }
    base.update(overrides)
    return load_config(tmp_path / "missing.yaml", overrides=base)


@pytest.fixture
def service(tmp_path: Path):
    svc = MediaLibraryService(_cfg(tmp_path), thumbnails=StubThumbnails())
    yield svc
    svc.close()


def _image(tmp_path: Path, name: str, size: tuple[int, int] = (40, 30)) -> Path:
    src = tmp_path / "incoming"
    src.mkdir(exist_ok=True)
    path = src / name
    Image.new("RGB", size, color=(0, 120, 200)).save(path)
    return path


def test_save_twice_keeps_both_copies(service: MediaLibraryService, tmp_path: Path) -> None:
    source = _image(tmp_path, "beach.jpg")

    first = service.save_to_library(str(source))
    second = service.save_to_library(source.as_uri(), "photo")

    pictures = tmp_path / "Pictures"
    assert sorted(p.name for p in pictures.iterdir()) == ["beach.jpg", "beach_0.jpg"]
    base = service.config.uris.photo_base
    assert record_id_from_uri(base, first) is not None
    assert record_id_from_uri(base, second) is not None
    assert first != second


def test_imported_photo_is_listed(service: MediaLibraryService, tmp_path: Path) -> None:
    uri = service.save_to_library(str(_image(tmp_path, "sunset.png")))

    result = service.get_photos({"first": 10})

    assert result["page_info"] == {"has_next_page": False}
    [asset] = result["assets"]
    assert asset["uri"] == uri
    assert asset["filename"] == "sunset.png"
    assert asset["mediaType"] == "photo"
    assert asset["mimeType"] == "image/png"
    assert (asset["width"], asset["height"]) == (40.0, 30.0)
    assert isinstance(asset["creationDate"], int)
    assert "sourceUri" not in asset


def test_albums_and_default_album(service: MediaLibraryService, tmp_path: Path) -> None:
    service.save_to_library(str(_image(tmp_path, "a.jpg")))
    service.save_to_library(str(_image(tmp_path, "b.jpg")))

    albums = service.get_albums()["albums"]
    assert [a["id"] for a in albums][0] == "-1"
    assert albums[0]["assetCount"] == 2
    assert albums[1]["title"] == "Pictures"
    assert albums[1]["assetCount"] == 2
    assert len(albums[1]["previewAssets"]) == 1

    default = service.get_default_album()
    assert default is not None
    assert default["id"] == "-1"
    assert default["title"] == "All"


def test_default_album_on_empty_library(service: MediaLibraryService) -> None:
    assert service.get_default_album() is None
    assert service.get_albums() == {"albums": []}
    assert service.get_photos({"first": 5}) == {"assets": [], "page_info": {"has_next_page": False}}


def test_invalid_requests(service: MediaLibraryService, tmp_path: Path) -> None:
    with pytest.raises(InvalidArgumentError):
        service.get_photos({})
    with pytest.raises(UnsupportedOptionError):
        service.get_photos({"first": 1, "groupTypes": "Album"})
    with pytest.raises(InvalidArgumentError):
        service.save_to_library(str(_image(tmp_path, "x.jpg")), "audio")


def test_submitted_work_runs_on_pool(service: MediaLibraryService, tmp_path: Path) -> None:
    uri = service.submit_import(str(_image(tmp_path, "pool.jpg"))).result(timeout=10)

    pages = [service.submit_photos({"first": 1}) for _ in range(4)]
    results = [f.result(timeout=10) for f in pages]
    assert all(r["assets"][0]["uri"] == uri for r in results)
    assert service.submit_albums().result(timeout=10)["albums"][0]["assetCount"] == 1


def test_broken_store_is_unavailable(service: MediaLibraryService) -> None:
    with service.db.connect() as conn:
        conn.execute("DROP TABLE video_thumbnails")
        conn.execute("DROP TABLE files")

    with pytest.raises(StoreUnavailableError):
        service.get_photos({"first": 1})


def test_status_counts(service: MediaLibraryService, tmp_path: Path) -> None:
    service.save_to_library(str(_image(tmp_path, "c.jpg")))
    status = service.status()
    assert status["photos"] == 1
    assert status["videos"] == 0
    assert status["pictures_dir"] == str(tmp_path / "Pictures")
