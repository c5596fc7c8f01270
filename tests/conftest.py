"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json

import httpx
from fastapi.testclient import TestClient

from app.main import app
from app.api.dependencies import get_channel, get_text_completion
from app.exceptions import UpstreamServiceError
from app.services.whatsapp import WhatsAppChannel


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


class FakeAssistant:
    """TextCompletion stand-in that records questions."""

    def __init__(self, answer="Resposta de teste", fail=False):
        self.answer = answer
        self.fail = fail
        self.questions = []

    async def complete(self, prompt):
        self.questions.append(prompt)
        if self.fail:
            raise UpstreamServiceError("Gemini", "boom")
        return self.answer


class GraphAPIRecorder:
    """httpx MockTransport handler that records sent messages."""

    def __init__(self, status_code=200):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": {"message": "rejected"}})
        return httpx.Response(
            self.status_code,
            json={"messages": [{"id": f"wamid.{len(self.requests)}"}]},
        )

    def bodies(self):
        return [json.loads(r.content)["text"]["body"] for r in self.requests]


@pytest.fixture
def fake_assistant():
    return FakeAssistant()


@pytest.fixture
def graph_api():
    return GraphAPIRecorder()


@pytest.fixture
def channel(graph_api):
    return WhatsAppChannel(
        access_token="test-token",
        phone_number_id="1234567890",
        verify_token="verify-me",
        api_version="v19.0",
        timeout=5.0,
        transport=httpx.MockTransport(graph_api),
    )


@pytest.fixture
def client(fake_assistant, channel):
    """Test client with the external capabilities replaced."""
    app.dependency_overrides[get_text_completion] = lambda: fake_assistant
    app.dependency_overrides[get_channel] = lambda: channel
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_payload():
    """Factory for webhook notifications."""
    return text_message_payload


def text_message_payload(sender="5511999999999", body="/juros 1000 5 12", msg_type="text"):
    """Minimal WhatsApp Cloud API webhook notification."""
    message = {
        "from": sender,
        "id": "wamid.incoming",
        "timestamp": "1700000000",
        "type": msg_type,
    }
    if msg_type == "text":
        message["text"] = {"body": body}
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "WABA_ID",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": "1234567890"},
                            "messages": [message],
                        },
                    }
                ],
            }
        ],
    }
