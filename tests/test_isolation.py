"""Cross-tenant isolation: a user never sees or changes another user's tasks."""

from conftest import SIX_TASKS, seed_tasks


def test_lists_are_scoped_to_the_caller(client, db_session, alice, bob):
    seed_tasks(db_session, alice["id"], SIX_TASKS)
    seed_tasks(db_session, bob["id"], SIX_TASKS[:2])

    alice_list = client.get("/tasks", headers=alice["headers"]).json()
    bob_list = client.get("/tasks", headers=bob["headers"]).json()

    assert alice_list["totalTasks"] == 6
    assert bob_list["totalTasks"] == 2
    assert {task["ownerId"] for task in bob_list["tasks"]} == {bob["id"]}


def test_search_does_not_cross_tenants(client, db_session, alice, bob):
    seed_tasks(db_session, alice["id"], SIX_TASKS)

    res = client.get("/tasks?search=Searchable", headers=bob["headers"])

    assert res.json()["totalTasks"] == 0


def test_non_owner_gets_not_found_for_read_update_and_delete(client, alice, bob):
    task = client.post("/tasks", json={"title": "Alice only"}, headers=alice["headers"]).json()["task"]
    path = f"/tasks/{task['id']}"

    read = client.get(path, headers=bob["headers"])
    update = client.put(path, json={"title": "Hijacked"}, headers=bob["headers"])
    delete = client.delete(path, headers=bob["headers"])

    for res in (read, update, delete):
        assert res.status_code == 404
        assert res.json() == {"message": "Task not found."}

    still_there = client.get(path, headers=alice["headers"])
    assert still_there.status_code == 200
    assert still_there.json()["title"] == "Alice only"
