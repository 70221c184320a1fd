import pytest

from domain.errors import AssetStoreError
from storage import asset_store as asset_store_module
from storage.asset_store import LocalAssetStore, folder_for, get_asset_store
from storage.cloudinary_store import CloudinaryAssetStore


def test_folder_for_by_type():
    assert folder_for("/tmp/cover.JPG") == "covers"
    assert folder_for("/tmp/cover.png") == "covers"
    assert folder_for("/tmp/book.pdf") == "files"
    assert folder_for("/tmp/noext") == "files"


def test_local_upload_and_remove(tmp_path):
    source = tmp_path / "staged.pdf"
    source.write_bytes(b"%PDF-1.4 test")
    store = LocalAssetStore(str(tmp_path / "media"), "http://api.test/")

    stored = store.upload(str(source))

    assert stored.public_url.startswith("http://api.test/media/uploads/files/")
    assert stored.public_url.endswith(".pdf")
    saved = tmp_path / "media" / stored.public_id
    assert saved.read_bytes() == b"%PDF-1.4 test"
    # the staged source is left for its owner to clean up
    assert source.exists()

    store.remove(stored.public_url)
    assert not saved.exists()


def test_local_remove_accepts_other_host(tmp_path):
    source = tmp_path / "c.jpg"
    source.write_bytes(b"img")
    store = LocalAssetStore(str(tmp_path / "media"), "http://localhost:8000")
    stored = store.upload(str(source), folder="covers")

    store.remove(stored.public_url.replace("http://localhost:8000", "https://elib.example.com"))

    assert not (tmp_path / "media" / stored.public_id).exists()


def test_local_remove_ignores_foreign_and_missing(tmp_path):
    store = LocalAssetStore(str(tmp_path / "media"))
    store.remove("https://res.cloudinary.com/demo/image/upload/v1/x.jpg")
    store.remove("http://localhost:8000/media/uploads/covers/gone.jpg")


def test_local_upload_missing_file(tmp_path):
    store = LocalAssetStore(str(tmp_path / "media"))
    with pytest.raises(AssetStoreError):
        store.upload(str(tmp_path / "missing.jpg"))


def test_get_asset_store_local(monkeypatch, tmp_path):
    monkeypatch.setattr(asset_store_module.settings, "ASSET_STORE", "local")
    monkeypatch.setattr(asset_store_module.settings, "MEDIA_ROOT", str(tmp_path / "m"))
    assert isinstance(get_asset_store(), LocalAssetStore)


def test_get_asset_store_cloudinary(monkeypatch):
    s = asset_store_module.settings
    monkeypatch.setattr(s, "ASSET_STORE", "cloudinary")
    monkeypatch.setattr(s, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(s, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(s, "CLOUDINARY_API_SECRET", "secret")
    store = get_asset_store()
    assert isinstance(store, CloudinaryAssetStore)
    assert store.cloud_name == "demo"


def test_get_asset_store_cloudinary_without_credentials(monkeypatch):
    s = asset_store_module.settings
    monkeypatch.setattr(s, "ASSET_STORE", "cloudinary")
    monkeypatch.setattr(s, "CLOUDINARY_CLOUD_NAME", None)
    with pytest.raises(ValueError):
        get_asset_store()


def test_get_asset_store_unknown(monkeypatch):
    monkeypatch.setattr(asset_store_module.settings, "ASSET_STORE", "ftp")
    with pytest.raises(ValueError):
        get_asset_store()
