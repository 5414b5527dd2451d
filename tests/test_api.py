from datetime import date, timedelta

from app.core.security import create_access_token

TODAY = date.today()


async def create_goal(client, **overrides):
    payload = {"name": "Emergency Fund", "target_amount": 1000, "priority": "High", "type": "Emergency"}
    payload.update(overrides)
    response = await client.post("/api/v1/goals", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health_and_root(anonymous_client):
    assert (await anonymous_client.get("/health")).json()["status"] == "healthy"
    assert (await anonymous_client.get("/")).status_code == 200


async def test_requires_authentication(anonymous_client):
    response = await anonymous_client.get("/api/v1/goals")
    assert response.status_code == 401

    response = await anonymous_client.get("/api/v1/goals", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_bearer_token_resolves_user(anonymous_client, user):
    token = create_access_token(str(user.id))
    response = await anonymous_client.get("/api/v1/goals", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json() == []


async def test_goal_lifecycle(client):
    goal = await create_goal(client, current_amount=250)
    assert goal["current_amount"] == 250
    assert goal["progress_percentage"] == 25
    assert goal["priority"] == "High"

    response = await client.patch(f"/api/v1/goals/{goal['id']}", json={"name": "Rainy Day"})
    assert response.json()["name"] == "Rainy Day"

    goals = (await client.get("/api/v1/goals")).json()
    assert [g["id"] for g in goals] == [goal["id"]]

    assert (await client.delete(f"/api/v1/goals/{goal['id']}")).status_code == 204
    assert (await client.get(f"/api/v1/goals/{goal['id']}")).status_code == 404


async def test_contributions_update_total_and_notify(client):
    goal = await create_goal(client)
    url = f"/api/v1/goals/{goal['id']}/contributions"

    response = await client.post(url, json={"amount": 400, "date": (TODAY - timedelta(days=2)).isoformat()})
    assert response.status_code == 201
    first_id = response.json()["id"]

    await client.post(url, json={"amount": 600, "date": TODAY.isoformat(), "notes": "Bonus"})
    refreshed = (await client.get(f"/api/v1/goals/{goal['id']}")).json()
    assert refreshed["current_amount"] == 1000

    notifications = (await client.get("/api/v1/notification/")).json()
    assert [n["title"] for n in notifications] == ["Goal Achieved! 🎉"]
    assert notifications[0]["priority"] == "high"

    assert (await client.delete(f"{url}/{first_id}")).status_code == 204
    refreshed = (await client.get(f"/api/v1/goals/{goal['id']}")).json()
    assert refreshed["current_amount"] == 600
    assert len((await client.get(url)).json()) == 1


async def test_goal_target_cannot_drop_below_milestone(client):
    goal = await create_goal(client)
    goal_url = f"/api/v1/goals/{goal['id']}"
    response = await client.post(f"{goal_url}/milestones", json={"title": "Most of it", "target_amount": 800})
    assert response.status_code == 201

    response = await client.patch(goal_url, json={"target_amount": 100})
    assert response.status_code == 400
    assert (await client.get(goal_url)).json()["target_amount"] == 1000

    response = await client.patch(goal_url, json={"target_amount": 800})
    assert response.status_code == 200
    assert response.json()["target_amount"] == 800


async def test_contribution_validation(client):
    goal = await create_goal(client)
    url = f"/api/v1/goals/{goal['id']}/contributions"

    future = (TODAY + timedelta(days=1)).isoformat()
    assert (await client.post(url, json={"amount": 10, "date": future})).status_code == 422
    assert (await client.post(url, json={"amount": 0, "date": TODAY.isoformat()})).status_code == 422
    assert (await client.post(url, json={"amount": 10, "date": TODAY.isoformat(), "notes": "x" * 201})).status_code == 422


async def test_history_and_suggestions(client):
    goal = await create_goal(client, target_amount=5000)
    url = f"/api/v1/goals/{goal['id']}/contributions"
    for days_ago in (14, 7, 0):
        await client.post(url, json={"amount": 1000, "date": (TODAY - timedelta(days=days_ago)).isoformat()})

    history = (await client.get(f"/api/v1/goals/{goal['id']}/history")).json()
    assert history["average_contribution"] == 1000
    assert history["preferred_frequency"] == "week"
    assert history["contribution_pattern"] == "consistent"

    suggestions = (await client.get(f"/api/v1/goals/{goal['id']}/suggestions")).json()
    confidences = [s["confidence"] for s in suggestions]
    assert confidences == sorted(confidences, reverse=True)
    assert suggestions[-1]["frequency"] == "flexible"
    assert suggestions[-1]["amount"] == 200


async def test_reached_goal_has_no_suggestions(client):
    goal = await create_goal(client, current_amount=1000)
    assert (await client.get(f"/api/v1/goals/{goal['id']}/suggestions")).json() == []


async def test_milestones(client):
    goal = await create_goal(client, current_amount=300)
    url = f"/api/v1/goals/{goal['id']}/milestones"

    too_big = await client.post(url, json={"title": "Too much", "target_amount": 5000})
    assert too_big.status_code == 400

    reached = await client.post(url, json={"title": "Started", "target_amount": 200})
    assert reached.status_code == 201
    assert reached.json()["achieved"] is True
    assert reached.json()["achieved_at"] is not None

    pending = (await client.post(url, json={"title": "Halfway", "target_amount": 500})).json()
    assert pending["achieved"] is False

    suggestions = (await client.get(f"{url}/{pending['id']}/suggestions")).json()
    assert suggestions[-1]["amount"] == 20
    assert (await client.get(f"{url}/{reached.json()['id']}/suggestions")).json() == []

    analytics = (await client.get(f"{url}/analytics")).json()
    assert analytics["total"] == 2
    assert analytics["achieved"] == 1
    assert analytics["completion_rate"] == 50

    await client.post(f"/api/v1/goals/{goal['id']}/contributions", json={"amount": 250, "date": TODAY.isoformat()})
    milestones = (await client.get(url)).json()
    assert all(m["achieved"] for m in milestones)

    assert (await client.delete(f"{url}/{pending['id']}")).status_code == 204
    assert len((await client.get(url)).json()) == 1


async def test_notification_status_endpoints(client):
    goal = await create_goal(client, current_amount=1000)
    notification = (await client.get("/api/v1/notification/")).json()[0]
    url = f"/api/v1/notification/{notification['id']}"

    assert (await client.get("/api/v1/notification/unread-count")).json() == 1

    read = await client.post(f"{url}/read")
    assert read.json()["status"] == "read"
    assert read.json()["read_at"] is not None

    assert (await client.post(f"{url}/archive")).json()["status"] == "archived"
    assert (await client.post(f"{url}/read")).status_code == 409

    assert (await client.get("/api/v1/notification/")).json() == []
    archived = (await client.get("/api/v1/notification/", params={"include_archived": True})).json()
    assert [n["id"] for n in archived] == [notification["id"]]

    # re-evaluating does not recreate an alert the user already had
    assert goal["current_amount"] == 1000
    assert (await client.post("/api/v1/notification/evaluate")).json() == []

    assert (await client.delete(url)).status_code == 204
    assert (await client.get(url)).status_code == 404


async def test_read_all(client):
    await create_goal(client, name="One", current_amount=1000)
    await create_goal(client, name="Two", current_amount=1000)

    assert (await client.post("/api/v1/notification/read_all")).json() == 2
    assert (await client.get("/api/v1/notification/unread-count")).json() == 0


async def test_preferences(client):
    prefs = (await client.get("/api/v1/notification/preferences")).json()
    assert prefs["deadline_days_threshold"] == 7

    response = await client.patch("/api/v1/notification/preferences", json={"goal_progress_alert": False})
    assert response.json()["goal_progress_alert"] is False

    await create_goal(client, current_amount=1000)
    assert (await client.get("/api/v1/notification/")).json() == []


async def test_categories_and_expenses(client):
    category = await client.post("/api/v1/categories", json={"name": "Food"})
    assert category.status_code == 201
    category_id = category.json()["id"]
    assert (await client.post("/api/v1/categories", json={"name": "Food"})).status_code == 409

    unknown = await client.post("/api/v1/expenses", json={
        "amount": 10, "date": TODAY.isoformat(), "category_id": "00000000-0000-0000-0000-000000000000",
    })
    assert unknown.status_code == 400

    created = await client.post("/api/v1/expenses", json={
        "amount": 120.5, "date": TODAY.isoformat(), "description": "Groceries",
        "category_id": category_id, "payment_mode": "UPI",
    })
    assert created.status_code == 201
    expense = created.json()
    assert expense["payment_mode"] == "UPI"

    await client.post("/api/v1/expenses", json={"amount": 30, "date": TODAY.isoformat()})

    listed = (await client.get("/api/v1/expenses", params={"category_id": category_id})).json()
    assert [e["id"] for e in listed] == [expense["id"]]
    assert len((await client.get("/api/v1/expenses", params={"limit": 1})).json()) == 1

    summary = (await client.get("/api/v1/expenses/summary/monthly")).json()
    assert summary["total_spent"] == 150.5
    assert summary["by_category"] == {"Food": 120.5, "Uncategorized": 30}
    assert summary["historical_average"] == 50000

    updated = await client.patch(f"/api/v1/expenses/{expense['id']}", json={"amount": 99})
    assert updated.json()["amount"] == 99

    assert (await client.delete(f"/api/v1/expenses/{expense['id']}")).status_code == 204
    assert (await client.get(f"/api/v1/expenses/{expense['id']}")).status_code == 404

    assert (await client.delete(f"/api/v1/categories/{category_id}")).status_code == 204
