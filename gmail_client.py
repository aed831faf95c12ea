# gmail_client.py
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config import (
    CLIENT_SECRETS_FILE,
    CREDENTIALS_PATH,
    LIST_FIELDS,
    MAX_BATCH_SIZE,
    PAGE_SIZE,
    SCOPES,
    USER_ID,
)

logger = logging.getLogger(__name__)

HTTP_OK = 200

# Failures of the list call or of a whole batch request; these end the run.
TRANSPORT_ERRORS = (HttpError, httplib2.HttpLib2Error, GoogleAuthError, OSError)


def authorize(client_secrets_file: str = CLIENT_SECRETS_FILE,
              credentials_path: str = CREDENTIALS_PATH,
              scopes: Optional[List[str]] = None) -> Credentials:
    """Return valid credentials, restoring them from disk when possible.

    Expired credentials with a refresh token are refreshed in place. Anything
    else falls back to the installed-app flow, which opens the user's browser
    to approve the request. The resulting credentials are written back to
    ``credentials_path`` for the next run.
    """
    scopes = scopes or SCOPES
    creds = None
    if os.path.exists(credentials_path):
        creds = Credentials.from_authorized_user_file(credentials_path, scopes)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        logger.debug("Refreshing expired credentials")
        creds.refresh(Request())
    else:
        flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, scopes)
        creds = flow.run_local_server(port=0)

    os.makedirs(os.path.dirname(credentials_path) or ".", exist_ok=True)
    with open(credentials_path, "w") as f:
        f.write(creds.to_json())
    logger.info("Credentials saved to %s", credentials_path)
    return creds


def status_of(error: HttpError) -> Optional[int]:
    resp = getattr(error, "resp", None)
    status = getattr(resp, "status", None)
    return int(status) if status is not None else None


class GmailClient:
    """Thin wrapper over the Gmail v1 messages resource.

    ``service`` may be passed in directly (tests hand in a fake resource);
    otherwise credentials are obtained through :func:`authorize`.
    """

    def __init__(self, service=None, user_id: str = USER_ID, credentials=None):
        if service is None:
            creds = credentials or authorize()
            service = build("gmail", "v1", credentials=creds, cache_discovery=False)
        self.service = service
        self.user_id = user_id

    def request_params(self, message_id: str) -> Dict[str, str]:
        """Parameters of a trash request, as echoed in failure diagnostics."""
        return {"userId": self.user_id, "id": message_id}

    def list_message_ids_page(self, query: str, page_token: Optional[str] = None,
                              max_results: int = PAGE_SIZE) -> Dict[str, Any]:
        """Fetch one page of message ids matching query.

        Only ids, the next page token and the result size estimate are
        requested. Errors from the API propagate to the caller.
        """
        params = {
            "userId": self.user_id,
            "q": query,
            "maxResults": max_results,
            "fields": LIST_FIELDS,
        }
        if page_token:
            params["pageToken"] = page_token
        logger.info("Fetching messages to delete.  Params: %s", params)
        response = self.service.users().messages().list(**params).execute()
        return {
            "message_ids": [m["id"] for m in response.get("messages", []) or []],
            "next_page_token": response.get("nextPageToken"),
            "result_size_estimate": response.get("resultSizeEstimate"),
        }

    def trash(self, message_id: str) -> Optional[int]:
        """Move a single message to Trash and return the HTTP status."""
        try:
            self.service.users().messages().trash(userId=self.user_id, id=message_id).execute()
        except HttpError as error:
            return status_of(error)
        return HTTP_OK

    def trash_batch(self, message_ids: List[str]) -> List[Tuple[str, Optional[int]]]:
        """Trash up to MAX_BATCH_SIZE messages in one batch round trip.

        Returns one ``(message_id, status)`` pair per submitted id, in request
        order. Ids the batch response never reported on get a ``None`` status.
        An error executing the batch envelope itself propagates.
        """
        if len(message_ids) > MAX_BATCH_SIZE:
            raise ValueError(f"At most {MAX_BATCH_SIZE} messages per batch, got {len(message_ids)}")
        if not message_ids:
            return []

        statuses: Dict[str, Optional[int]] = {}

        def on_result(request_id, response, exception):
            if exception is None:
                statuses[request_id] = HTTP_OK
            elif isinstance(exception, HttpError):
                statuses[request_id] = status_of(exception)
            else:
                logger.debug("Batch item %s raised %r", request_id, exception)
                statuses[request_id] = None

        batch = self.service.new_batch_http_request(callback=on_result)
        for mid in message_ids:
            batch.add(
                self.service.users().messages().trash(userId=self.user_id, id=mid),
                request_id=mid,
            )
        batch.execute()
        return [(mid, statuses.get(mid)) for mid in message_ids]
