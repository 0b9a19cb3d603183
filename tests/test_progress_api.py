def test_create_progress_entry(auth_client, make_goal):
    goal = make_goal(target_value="40")

    response = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "10", "notes": "  First run  "})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["progress"]["value"] == "10"
    assert data["progress"]["notes"] == "First run"
    assert data["goal"] == {"id": goal["id"], "status": "active"}
    assert data["computed"] == {"current_value": "10", "progress_percent": 25}


def test_create_progress_empty_notes_become_null(auth_client, make_goal):
    goal = make_goal()

    response = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "1", "notes": "   "})

    assert response.json()["data"]["progress"]["notes"] is None


def test_create_progress_validation(auth_client, make_goal):
    goal = make_goal()

    zero = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "0"})
    long_notes = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "1", "notes": "n" * 151})
    number = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": 5})

    assert zero.status_code == 422
    assert zero.json()["error"]["details"][0]["message"] == "Value must be a positive number."
    assert long_notes.status_code == 422
    assert long_notes.json()["error"]["details"][0]["message"] == "Notes can be at most 150 characters."
    assert number.status_code == 422


def test_create_progress_rejects_value_below_stored_precision(auth_client, make_goal):
    goal = make_goal()

    rounded = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "0.12345"})
    exact = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "0.1234"})

    assert rounded.status_code == 422
    assert rounded.json()["error"]["details"][0]["message"] == "Value can have at most 4 decimal places."
    assert exact.status_code == 201
    assert exact.json()["data"]["progress"]["value"] == "0.1234"
    assert auth_client.get(f"/api/goals/{goal['id']}/progress").json()["data"]["total"] == 1


def test_create_progress_on_closed_goal(auth_client, make_goal):
    goal = make_goal()
    auth_client.post(f"/api/goals/{goal['id']}/abandon", json={"reason": "Done with it"})

    response = auth_client.post(f"/api/goals/{goal['id']}/progress", json={"value": "1"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "goal_not_active"


def test_list_progress_newest_first(auth_client, make_goal, add_progress):
    goal = make_goal()
    first = add_progress(goal["id"], "1")
    second = add_progress(goal["id"], "2")

    response = auth_client.get(f"/api/goals/{goal['id']}/progress")

    data = response.json()["data"]
    assert data["total"] == 2
    assert [item["id"] for item in data["items"]] == [second["id"], first["id"]]
    assert data["items"][0]["value"] == "2"


def test_list_progress_of_another_users_goal(make_goal, other_client):
    goal = make_goal()

    response = other_client.get(f"/api/goals/{goal['id']}/progress")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "goal_not_found"


def test_update_progress_entry(auth_client, make_goal, add_progress):
    goal = make_goal()
    entry = add_progress(goal["id"], "1")

    response = auth_client.patch(f"/api/progress/{entry['id']}", json={"value": "3.25", "notes": "Corrected"})

    assert response.status_code == 200
    progress = response.json()["data"]["progress"]
    assert progress["value"] == "3.25"
    assert progress["notes"] == "Corrected"
    assert auth_client.get(f"/api/goals/{goal['id']}").json()["data"]["goal"]["computed"]["current_value"] == "3.25"


def test_update_progress_of_another_user(make_goal, add_progress, other_client):
    goal = make_goal()
    entry = add_progress(goal["id"])

    response = other_client.patch(f"/api/progress/{entry['id']}", json={"value": "3"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "progress_not_found"


def test_progress_frozen_after_goal_closes(auth_client, make_goal, add_progress):
    goal = make_goal()
    entry = add_progress(goal["id"])
    auth_client.post(f"/api/goals/{goal['id']}/abandon", json={"reason": "Stopped"})

    update = auth_client.patch(f"/api/progress/{entry['id']}", json={"notes": "Late edit"})
    delete = auth_client.delete(f"/api/progress/{entry['id']}")

    assert update.status_code == 409
    assert update.json()["error"]["code"] == "goal_not_active"
    assert delete.status_code == 409


def test_delete_progress_entry(auth_client, make_goal, add_progress):
    goal = make_goal()
    entry = add_progress(goal["id"])

    response = auth_client.delete(f"/api/progress/{entry['id']}")

    assert response.status_code == 204
    assert auth_client.get(f"/api/goals/{goal['id']}").json()["data"]["goal"]["computed"]["entries_count"] == 0
