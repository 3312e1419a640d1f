import io

from PIL import Image
from starlette.datastructures import UploadFile

from app.config import settings

API = "/api/v1"


def png_bytes(width=4, height=3) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


async def test_upload_to_root(client, sign_in, upload):
    headers, owner_id = await sign_in("owner")

    response = await upload(headers, "hello.txt", b"hello")
    assert response.status_code == 201
    file = response.json()["file"]
    assert file["folderId"] is None
    assert file["size"] == 5
    assert file["mimeType"] == "text/plain"
    assert file["blobUrl"].startswith("local://users/")
    assert file["metadata"]["category"] == "text"
    assert file["metadata"]["storageKey"].endswith("/hello.txt")


async def test_image_dimensions_recorded(client, sign_in, upload):
    headers, _ = await sign_in("owner")

    response = await upload(headers, "pixel.png", png_bytes(4, 3), "image/png")
    metadata = response.json()["file"]["metadata"]
    assert metadata["width"] == 4
    assert metadata["height"] == 3


async def test_too_large(client, sign_in, upload, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
    headers, _ = await sign_in("owner")

    response = await upload(headers, "big.txt", b"x" * (1024 * 1024 + 1))
    assert response.status_code == 400
    assert response.json()["error"] == "File too large. Maximum size is 1MB"


async def test_type_not_allowed(client, sign_in, upload):
    headers, _ = await sign_in("owner")

    response = await upload(headers, "tool.exe", b"MZ", "application/x-msdownload")
    assert response.status_code == 400
    assert response.json()["error"] == "File type not allowed"


async def test_missing_file(client, sign_in):
    headers, _ = await sign_in("owner")

    response = await client.post(f"{API}/upload", headers=headers, data={"replace": "false"})
    assert response.status_code == 400


async def test_folder_must_be_owned(client, sign_in, upload, create_folder):
    alice, _ = await sign_in("alice")
    bob, _ = await sign_in("bob")
    folder = await create_folder(alice, "Alice only")

    response = await upload(bob, "x.txt", folder_id=folder["id"])
    assert response.status_code == 404


async def test_name_collision_then_replace(client, sign_in, upload):
    headers, _ = await sign_in("owner")
    first = (await upload(headers, "doc.txt", b"v1")).json()["file"]

    clash = await upload(headers, "doc.txt", b"v2")
    assert clash.status_code == 409

    replaced = await upload(headers, "doc.txt", b"version two", replace=True)
    assert replaced.status_code == 201
    file = replaced.json()["file"]
    assert file["id"] == first["id"]
    assert file["version"] == 2
    assert file["size"] == len(b"version two")

    versions = await client.get(f"{API}/files/{first['id']}/versions", headers=headers)
    assert [v["version"] for v in versions.json()["versions"]] == [2, 1]


async def test_same_name_in_different_folders(client, sign_in, upload, create_folder):
    headers, _ = await sign_in("owner")
    folder = await create_folder(headers, "Inbox")

    assert (await upload(headers, "doc.txt")).status_code == 201
    assert (await upload(headers, "doc.txt", folder_id=folder["id"])).status_code == 201


async def test_requires_authentication(client, upload):
    response = await upload({}, "anon.txt")
    assert response.status_code == 401


async def test_too_large_rejected_before_reading(client, sign_in, upload, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
    headers, _ = await sign_in("owner")

    async def refuse_read(self, size=-1):
        raise AssertionError("oversized upload was buffered")

    monkeypatch.setattr(UploadFile, "read", refuse_read)

    response = await upload(headers, "big.txt", b"x" * (1024 * 1024 + 1))
    assert response.status_code == 400
