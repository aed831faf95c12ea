from unittest import mock

import pytest
from googleapiclient.errors import HttpError

import gmail_client
from fakes import FakeMessagesResource, FakeService, http_error
from gmail_client import GmailClient


def test_list_requests_ids_only():
    messages = FakeMessagesResource(list_responses=[
        {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "next", "resultSizeEstimate": 250},
    ])
    client = GmailClient(service=FakeService(messages))

    page = client.list_message_ids_page("from:x before:2020/01/01")

    assert page == {"message_ids": ["a", "b"], "next_page_token": "next", "result_size_estimate": 250}
    call = messages.list_calls[0]
    assert call["userId"] == "me"
    assert call["q"] == "from:x before:2020/01/01"
    assert call["maxResults"] == 100
    assert call["fields"] == "messages/id,nextPageToken,resultSizeEstimate"
    assert "pageToken" not in call


def test_list_passes_page_token_and_handles_empty_result():
    messages = FakeMessagesResource(list_responses=[{"resultSizeEstimate": 0}])
    client = GmailClient(service=FakeService(messages))

    page = client.list_message_ids_page("q", page_token="tok")

    assert page["message_ids"] == []
    assert page["next_page_token"] is None
    assert messages.list_calls[0]["pageToken"] == "tok"


def test_list_errors_propagate():
    messages = mock.Mock()
    messages.list.return_value.execute.side_effect = http_error(401, "Unauthorized")
    service = mock.Mock()
    service.users.return_value.messages.return_value = messages
    client = GmailClient(service=service)

    with pytest.raises(HttpError):
        client.list_message_ids_page("q")


def test_trash_maps_http_errors_to_status():
    messages = FakeMessagesResource(trash_errors={"bad": http_error(404, "Not Found")})
    client = GmailClient(service=FakeService(messages), user_id="someone@example.com")

    assert client.trash("good") == 200
    assert client.trash("bad") == 404
    assert messages.trash_calls[0] == {"userId": "someone@example.com", "id": "good"}


def test_trash_batch_reports_status_per_id_in_order():
    messages = FakeMessagesResource(trash_errors={"b": http_error(500, "Backend Error")})
    service = FakeService(messages)
    client = GmailClient(service=service)

    results = client.trash_batch(["a", "b", "c"])

    assert results == [("a", 200), ("b", 500), ("c", 200)]
    assert len(service.batches) == 1
    assert [rid for rid, _ in service.batches[0].requests] == ["a", "b", "c"]


def test_trash_batch_missing_responses_get_none():
    service = FakeService(batch_skip={"b"})
    client = GmailClient(service=service)

    assert client.trash_batch(["a", "b"]) == [("a", 200), ("b", None)]


def test_trash_batch_envelope_error_propagates():
    client = GmailClient(service=FakeService(batch_error=http_error(503, "Unavailable")))
    with pytest.raises(HttpError):
        client.trash_batch(["a"])


def test_trash_batch_limits():
    service = FakeService()
    client = GmailClient(service=service)

    assert client.trash_batch([]) == []
    assert service.batches == []
    with pytest.raises(ValueError):
        client.trash_batch([str(i) for i in range(16)])


def test_request_params():
    client = GmailClient(service=FakeService())
    assert client.request_params("abc") == {"userId": "me", "id": "abc"}


def test_authorize_reuses_valid_saved_credentials(tmp_path):
    token = tmp_path / "token.json"
    token.write_text("{}")
    creds = mock.Mock(valid=True)
    with mock.patch.object(gmail_client.Credentials, "from_authorized_user_file", return_value=creds) as load, \
            mock.patch.object(gmail_client, "InstalledAppFlow") as flow:
        assert gmail_client.authorize("secrets.json", str(token)) is creds

    load.assert_called_once_with(str(token), gmail_client.SCOPES)
    flow.from_client_secrets_file.assert_not_called()


def test_authorize_refreshes_expired_credentials(tmp_path):
    token = tmp_path / "token.json"
    token.write_text("{}")
    creds = mock.Mock(valid=False, expired=True, refresh_token="r")
    creds.to_json.return_value = '{"refreshed": true}'
    with mock.patch.object(gmail_client.Credentials, "from_authorized_user_file", return_value=creds), \
            mock.patch.object(gmail_client, "InstalledAppFlow") as flow:
        assert gmail_client.authorize("secrets.json", str(token)) is creds

    creds.refresh.assert_called_once()
    flow.from_client_secrets_file.assert_not_called()
    assert token.read_text() == '{"refreshed": true}'


def test_authorize_runs_flow_on_first_use(tmp_path):
    token = tmp_path / "credentials" / "gmail-gdelete.json"
    creds = mock.Mock()
    creds.to_json.return_value = '{"token": "t"}'
    with mock.patch.object(gmail_client, "InstalledAppFlow") as flow:
        flow.from_client_secrets_file.return_value.run_local_server.return_value = creds
        assert gmail_client.authorize("secrets.json", str(token)) is creds

    flow.from_client_secrets_file.assert_called_once_with("secrets.json", gmail_client.SCOPES)
    assert token.read_text() == '{"token": "t"}'


def test_client_builds_service_from_credentials():
    creds = object()
    with mock.patch.object(gmail_client, "build") as build:
        client = GmailClient(credentials=creds)

    build.assert_called_once_with("gmail", "v1", credentials=creds, cache_discovery=False)
    assert client.service is build.return_value
