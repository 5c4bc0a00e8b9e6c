# tests/api/test_comments.py
import uuid

import pytest
from httpx import AsyncClient
from fastapi import status


@pytest.mark.asyncio
async def test_create_comment(client: AsyncClient, admin_headers: dict, submit_complaint):
    complaint = await submit_complaint()

    response = await client.post(
        f"/api/complaints/{complaint['id']}/comments",
        json={"comment_text": "We are **looking** into it."},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    comment = response.json()["data"]
    assert comment["complaint_id"] == complaint["id"]
    assert comment["author_name"] == "Alice Admin"
    assert comment["is_internal"] is False
    assert comment["comment_html"].strip() == "<p>We are <strong>looking</strong> into it.</p>"


@pytest.mark.asyncio
async def test_comment_html_is_sanitized(client: AsyncClient, agent_headers: dict, submit_complaint):
    complaint = await submit_complaint()

    response = await client.post(
        f"/api/complaints/{complaint['id']}/comments",
        json={"comment_text": "hi <script>alert(1)</script> there", "is_internal": True},
        headers=agent_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    comment = response.json()["data"]
    assert comment["author_name"] == "Bob Agent"
    assert comment["is_internal"] is True
    assert "script" not in comment["comment_html"]
    assert "alert" not in comment["comment_html"]
    # Raw text is kept as written
    assert comment["comment_text"] == "hi <script>alert(1)</script> there"


@pytest.mark.asyncio
async def test_comment_on_unknown_complaint(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        f"/api/complaints/{uuid.uuid4()}/comments",
        json={"comment_text": "Hello"},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "Complaint not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "x" * 5001])
async def test_comment_text_is_validated(client: AsyncClient, admin_headers: dict, submit_complaint, text: str):
    complaint = await submit_complaint()

    response = await client.post(
        f"/api/complaints/{complaint['id']}/comments",
        json={"comment_text": text},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"][0]["field"] == "comment_text"


@pytest.mark.asyncio
async def test_list_comments_oldest_first(client: AsyncClient, admin_headers: dict, submit_complaint):
    complaint = await submit_complaint()
    url = f"/api/complaints/{complaint['id']}/comments"

    for text, internal in [("first", False), ("second", True), ("third", False)]:
        response = await client.post(url, json={"comment_text": text, "is_internal": internal}, headers=admin_headers)
        assert response.status_code == status.HTTP_201_CREATED

    response = await client.get(url, headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    comments = response.json()["data"]
    assert [c["comment_text"] for c in comments] == ["first", "second", "third"]
    assert [c["is_internal"] for c in comments] == [False, True, False]


@pytest.mark.asyncio
async def test_list_comments_of_unknown_complaint(client: AsyncClient, admin_headers: dict):
    response = await client.get(f"/api/complaints/{uuid.uuid4()}/comments", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_comments_require_staff(client: AsyncClient, submit_complaint):
    complaint = await submit_complaint()
    url = f"/api/complaints/{complaint['id']}/comments"

    assert (await client.get(url)).status_code == status.HTTP_401_UNAUTHORIZED
    assert (await client.post(url, json={"comment_text": "Hi"})).status_code == status.HTTP_401_UNAUTHORIZED
