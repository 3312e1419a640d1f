import uuid

API = "/api/v1"


async def test_share_again_updates_in_place(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]

    first = await client.post(
        f"{API}/files/{file['id']}/share", headers=owner, json={"users": [{"id": viewer_id, "permission": "view"}]}
    )
    assert first.status_code == 200
    assert first.json()["publicLink"] is None

    second = await client.post(
        f"{API}/files/{file['id']}/share", headers=owner, json={"users": [{"id": viewer_id, "permission": "edit"}]}
    )
    assert second.status_code == 200

    shares = (await client.get(f"{API}/files/{file['id']}/share", headers=owner)).json()["shares"]
    assert len(shares) == 1
    assert shares[0]["permission"] == "edit"

    shared = (await client.get(f"{API}/files/shared-with-me", headers=viewer)).json()["files"]
    assert [f["id"] for f in shared] == [file["id"]]
    assert shared[0]["permission"] == "edit"
    assert shared[0]["owner"]["email"] == "owner@example.com"


async def test_batch_with_unknown_user_writes_nothing(client, sign_in, create_folder):
    owner, _ = await sign_in("owner")
    _, viewer_id = await sign_in("viewer")
    folder = await create_folder(owner, "Team")

    response = await client.post(
        f"{API}/folders/{folder['id']}/share",
        headers=owner,
        json={"users": [{"id": viewer_id}, {"id": str(uuid.uuid4())}], "createPublicLink": True},
    )
    assert response.status_code == 404

    listing = (await client.get(f"{API}/folders/{folder['id']}/share", headers=owner)).json()
    assert listing["shares"] == []
    assert listing["publicLink"] is None


async def test_only_owner_can_share(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    stranger, _ = await sign_in("stranger")
    _, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]

    response = await client.post(
        f"{API}/files/{file['id']}/share", headers=stranger, json={"users": [{"id": viewer_id}]}
    )
    assert response.status_code == 404


async def test_cannot_share_with_self(client, sign_in, upload):
    owner, owner_id = await sign_in("owner")
    file = (await upload(owner, "x.txt")).json()["file"]

    response = await client.post(f"{API}/files/{file['id']}/share", headers=owner, json={"users": [{"id": owner_id}]})
    assert response.status_code == 400


async def test_invalid_permission(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    _, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]

    response = await client.post(
        f"{API}/files/{file['id']}/share", headers=owner, json={"users": [{"id": viewer_id, "permission": "admin"}]}
    )
    assert response.status_code == 400


async def test_list_shares_access(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    stranger, _ = await sign_in("stranger")
    file = (await upload(owner, "x.txt")).json()["file"]
    await client.post(
        f"{API}/files/{file['id']}/share",
        headers=owner,
        json={"users": [{"id": viewer_id}], "createPublicLink": True},
    )

    as_owner = (await client.get(f"{API}/files/{file['id']}/share", headers=owner)).json()
    assert as_owner["publicLink"]["url"].startswith("http://test/shared/")

    as_grantee = await client.get(f"{API}/files/{file['id']}/share", headers=viewer)
    assert as_grantee.status_code == 200
    assert as_grantee.json()["publicLink"] is None
    assert as_grantee.json()["shares"][0]["user"]["id"] == viewer_id

    as_stranger = await client.get(f"{API}/files/{file['id']}/share", headers=stranger)
    assert as_stranger.status_code == 404


async def test_revoke_share(client, sign_in, create_folder):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    folder = await create_folder(owner, "Team")
    await client.post(f"{API}/folders/{folder['id']}/share", headers=owner, json={"users": [{"id": viewer_id}]})

    shared = (await client.get(f"{API}/folders/shared-with-me", headers=viewer)).json()["folders"]
    assert [f["id"] for f in shared] == [folder["id"]]

    revoked = await client.delete(f"{API}/folders/{folder['id']}/share/{viewer_id}", headers=owner)
    assert revoked.status_code == 200
    assert (await client.get(f"{API}/folders/shared-with-me", headers=viewer)).json()["folders"] == []

    again = await client.delete(f"{API}/folders/{folder['id']}/share/{viewer_id}", headers=owner)
    assert again.status_code == 404


async def test_expired_grant_is_hidden(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]

    await client.post(
        f"{API}/files/{file['id']}/share",
        headers=owner,
        json={"users": [{"id": viewer_id, "expiresAt": "2000-01-01T00:00:00Z"}]},
    )

    assert (await client.get(f"{API}/files/shared-with-me", headers=viewer)).json()["files"] == []


async def test_deleting_file_removes_its_shares(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]
    await client.post(f"{API}/files/{file['id']}/share", headers=owner, json={"users": [{"id": viewer_id}]})

    await client.delete(f"{API}/files/{file['id']}", headers=owner)

    assert (await client.get(f"{API}/files/shared-with-me", headers=viewer)).json()["files"] == []


async def test_revoke_public_links(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    file = (await upload(owner, "x.txt")).json()["file"]
    created = await client.post(f"{API}/files/{file['id']}/share", headers=owner, json={"createPublicLink": True})
    token = created.json()["publicLink"]["token"]

    response = await client.delete(f"{API}/files/{file['id']}/share/public", headers=owner)
    assert response.json()["revokedCount"] == 1
    assert (await client.get(f"{API}/shared/{token}")).status_code == 404


async def test_expired_grantee_cannot_list_shares(client, sign_in, upload):
    owner, _ = await sign_in("owner")
    viewer, viewer_id = await sign_in("viewer")
    file = (await upload(owner, "x.txt")).json()["file"]
    await client.post(
        f"{API}/files/{file['id']}/share",
        headers=owner,
        json={"users": [{"id": viewer_id, "expiresAt": "2000-01-01T00:00:00Z"}]},
    )

    response = await client.get(f"{API}/files/{file['id']}/share", headers=viewer)
    assert response.status_code == 404
