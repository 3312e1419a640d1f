API = "/api/v1"


async def test_root_names_are_unique_but_scoped_by_parent(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")

    reports = await create_folder(headers, "Reports")
    assert reports["parentId"] is None

    again = await client.post(f"{API}/folders", headers=headers, json={"name": "Reports"})
    assert again.status_code == 409
    assert "already exists" in again.json()["error"]

    group = await create_folder(headers, "G")
    nested = await create_folder(headers, "Reports", parent_id=group["id"])
    assert nested["parentId"] == group["id"]


async def test_same_name_allowed_for_different_owners(client, sign_in, create_folder):
    alice, _ = await sign_in("alice")
    bob, _ = await sign_in("bob")

    await create_folder(alice, "Shared name")
    await create_folder(bob, "Shared name")


async def test_name_is_trimmed_and_required(client, sign_in):
    headers, _ = await sign_in("user_u")

    response = await client.post(f"{API}/folders", headers=headers, json={"name": "  Notes  "})
    assert response.status_code == 201
    assert response.json()["folder"]["name"] == "Notes"

    blank = await client.post(f"{API}/folders", headers=headers, json={"name": "   "})
    assert blank.status_code == 400

    too_long = await client.post(f"{API}/folders", headers=headers, json={"name": "x" * 256})
    assert too_long.status_code == 400


async def test_parent_must_be_owned(client, sign_in, create_folder):
    alice, _ = await sign_in("alice")
    bob, _ = await sign_in("bob")
    private = await create_folder(alice, "Private")

    response = await client.post(
        f"{API}/folders", headers=bob, json={"name": "Sneaky", "parentId": private["id"]}
    )
    assert response.status_code == 404


async def test_rename_collision_is_a_conflict(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    await create_folder(headers, "Taken")
    other = await create_folder(headers, "Other")

    response = await client.patch(f"{API}/folders/{other['id']}", headers=headers, json={"name": "Taken"})
    assert response.status_code == 409

    # Renaming to its own name is not a collision
    same = await client.patch(f"{API}/folders/{other['id']}", headers=headers, json={"name": "Other"})
    assert same.status_code == 200


async def test_rename_updates_name(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    folder = await create_folder(headers, "Old")

    response = await client.patch(
        f"{API}/folders/{folder['id']}", headers=headers, json={"name": "New", "description": "Renamed"}
    )
    assert response.status_code == 200
    body = response.json()["folder"]
    assert body["name"] == "New"
    assert body["description"] == "Renamed"


async def test_list_children_and_all(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    parent = await create_folder(headers, "Parent")
    await create_folder(headers, "b-child", parent_id=parent["id"])
    await create_folder(headers, "a-child", parent_id=parent["id"])

    root = await client.get(f"{API}/folders", headers=headers)
    assert [f["name"] for f in root.json()["folders"]] == ["Parent"]

    children = await client.get(f"{API}/folders", headers=headers, params={"parentId": parent["id"]})
    assert [f["name"] for f in children.json()["folders"]] == ["a-child", "b-child"]

    everything = await client.get(f"{API}/folders", headers=headers, params={"all": "true"})
    assert len(everything.json()["folders"]) == 3


async def test_get_folder_has_path(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    reports = await create_folder(headers, "Reports")
    year = await create_folder(headers, "2024", parent_id=reports["id"])

    response = await client.get(f"{API}/folders/{year['id']}", headers=headers)
    assert response.status_code == 200
    folder = response.json()["folder"]
    assert folder["path"] == "My Drive / Reports / 2024"
    assert [crumb["name"] for crumb in folder["breadcrumbs"]] == ["Reports", "2024"]


async def test_tree(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    reports = await create_folder(headers, "Reports")
    await create_folder(headers, "2024", parent_id=reports["id"])

    response = await client.get(f"{API}/folders/tree", headers=headers)
    tree = response.json()["tree"]
    assert tree[0]["name"] == "Reports"
    assert tree[0]["children"][0]["name"] == "2024"


async def test_foreign_folder_is_not_found(client, sign_in, create_folder):
    alice, _ = await sign_in("alice")
    bob, _ = await sign_in("bob")
    folder = await create_folder(alice, "Mine")

    assert (await client.get(f"{API}/folders/{folder['id']}", headers=bob)).status_code == 404
    assert (await client.delete(f"{API}/folders/{folder['id']}", headers=bob)).status_code == 404


async def test_delete_refused_until_empty(client, sign_in, create_folder, upload):
    headers, _ = await sign_in("user_u")
    group = await create_folder(headers, "G")

    uploaded = await upload(headers, "a.pdf", b"%PDF-1.4 test", "application/pdf", folder_id=group["id"])
    assert uploaded.status_code == 201
    file = uploaded.json()["file"]
    assert file["folderId"] == group["id"]

    refused = await client.delete(f"{API}/folders/{group['id']}", headers=headers)
    assert refused.status_code == 409
    assert refused.json()["error"] == "Folder is not empty"

    assert (await client.delete(f"{API}/files/{file['id']}", headers=headers)).status_code == 200
    assert (await client.delete(f"{API}/folders/{group['id']}", headers=headers)).status_code == 200
    assert (await client.get(f"{API}/folders/{group['id']}", headers=headers)).status_code == 404


async def test_delete_refused_with_subfolder(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    parent = await create_folder(headers, "Parent")
    await create_folder(headers, "Child", parent_id=parent["id"])

    response = await client.delete(f"{API}/folders/{parent['id']}", headers=headers)
    assert response.status_code == 409


async def test_list_and_tree_share_sibling_order(client, sign_in, create_folder):
    headers, _ = await sign_in("user_u")
    await create_folder(headers, "Banana")
    await create_folder(headers, "apple")

    listed = (await client.get(f"{API}/folders", headers=headers)).json()["folders"]
    tree = (await client.get(f"{API}/folders/tree", headers=headers)).json()["tree"]

    assert [f["name"] for f in listed] == ["apple", "Banana"]
    assert [f["name"] for f in tree] == ["apple", "Banana"]
