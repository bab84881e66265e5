"""
Google service-account resolution for the Vertex AI backend of google-genai.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass

from google.oauth2 import service_account

DEFAULT_LOCATION = "us-central1"
SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


@dataclass(frozen=True)
class VertexConfig:
    credentials: service_account.Credentials
    project: str
    location: str


def _load_service_account_info(value: str) -> dict:
    if os.path.exists(value):
        with open(value) as handle:
            return json.load(handle)
    if value.strip().startswith("{"):
        try:
            return json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(
                "GOOGLE_APPLICATION_CREDENTIALS is not a valid JSON string."
            ) from exc
    if value.endswith(".json"):
        raise FileNotFoundError(f"GOOGLE_APPLICATION_CREDENTIALS file not found: {value}")
    raise ValueError("GOOGLE_APPLICATION_CREDENTIALS must be a file path or JSON string.")


def setup_google_credentials() -> VertexConfig:
    """Resolve service account credentials from env (file path or JSON string).

    The project comes from ``GOOGLE_CLOUD_PROJECT`` or the key's ``project_id``;
    the location from ``GOOGLE_CLOUD_LOCATION`` or ``GCP_REGION``.
    """
    value = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if not value:
        raise ValueError("GOOGLE_APPLICATION_CREDENTIALS environment variable not found.")

    info = _load_service_account_info(value)
    project = os.environ.get("GOOGLE_CLOUD_PROJECT") or info.get("project_id")
    if not project:
        raise ValueError("project_id not found in service account info.")
    location = (
        os.environ.get("GOOGLE_CLOUD_LOCATION")
        or os.environ.get("GCP_REGION")
        or DEFAULT_LOCATION
    )

    credentials = service_account.Credentials.from_service_account_info(
        info, scopes=SCOPES
    )
    return VertexConfig(credentials=credentials, project=project, location=location)
