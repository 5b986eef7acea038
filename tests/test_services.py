"""Tests for the backend service clients."""

import base64
import json
from unittest.mock import Mock

import pytest
import requests

from mtg_card_designer.domain import CardData, Template
from mtg_card_designer.errors import InputValidationError, ServiceError, SessionInvalidError
from mtg_card_designer.services import (
    ApiClient,
    AssetService,
    AuthService,
    PersistenceService,
    SetSymbolStore,
    user_id_from_token,
)


def make_token(claims) -> str:
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
    return f"header.{payload}.signature"


@pytest.fixture
def http():
    """Provide a mock requests session."""
    return Mock(spec=requests.Session)


@pytest.fixture
def client(http):
    """Provide an API client backed by the mock session."""
    return ApiClient(base_url="http://test.local/api/", token="secret", session=http)


def sent(http):
    """Return (method, url, kwargs) of the last request."""
    args, kwargs = http.request.call_args
    return args[0], args[1], kwargs


class TestApiClient:
    """Test suite for ApiClient."""

    def test_bearer_header(self, client, http, json_response) -> None:
        """Test that requests carry the token."""
        http.request.return_value = json_response(200, {"ok": True})

        assert client.get("templates") == {"ok": True}
        method, url, kwargs = sent(http)
        assert method == "GET"
        assert url == "http://test.local/api/templates"
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}

    def test_token_from_settings(self, http, monkeypatch) -> None:
        """Test the configured access token is used by default."""
        from mtg_card_designer.config import get_settings

        monkeypatch.setenv("ACCESS_TOKEN", "from-env")
        get_settings.cache_clear()
        assert ApiClient(session=http).token == "from-env"

    def test_no_token_no_header(self, http, json_response) -> None:
        """Test anonymous requests."""
        http.request.return_value = json_response(200, [])
        ApiClient(token="", session=http).get("decks/public")
        assert sent(http)[2]["headers"] == {}

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_session(self, client, http, json_response, status) -> None:
        """Test that 401 and 403 invalidate the session."""
        http.request.return_value = json_response(status, {"message": "Token expired"})

        with pytest.raises(SessionInvalidError, match="Token expired") as exc_info:
            client.get("templates")
        assert exc_info.value.status_code == status

    def test_server_message(self, client, http, json_response) -> None:
        """Test that the server's message is surfaced."""
        http.request.return_value = json_response(500, {"message": "Database down"})

        with pytest.raises(ServiceError, match="Database down"):
            client.get("decks")

    def test_default_message(self, client, http, json_response) -> None:
        """Test the fallback message when the body has none."""
        http.request.return_value = json_response(404)

        with pytest.raises(ServiceError, match="Failed to fetch deck"):
            client.get("decks/9", default_error="Failed to fetch deck")

    def test_network_error(self, client, http) -> None:
        """Test that connection failures become service errors."""
        http.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ServiceError) as exc_info:
            client.get("decks")
        assert not isinstance(exc_info.value, SessionInvalidError)

    def test_empty_body(self, client, http, json_response) -> None:
        """Test that empty responses decode to None."""
        http.request.return_value = json_response(204)
        assert client.delete("decks/1") is None


class TestPersistenceService:
    """Test suite for PersistenceService."""

    def test_templates_with_json_columns(self, client, http, json_response, template) -> None:
        """Test decoding templates whose nested fields are JSON strings."""
        row = template.to_json_dict()
        row["id"] = 12
        row["user_id"] = 3
        row["authorUsername"] = "alice"
        row["elements"] = json.dumps(row["elements"])
        row["fonts"] = json.dumps(row["fonts"])
        http.request.return_value = json_response(200, [row])

        templates = PersistenceService(client).get_templates()
        assert len(templates) == 1
        assert templates[0].id == "12"
        assert templates[0].owner_id == 3
        assert templates[0].author_name == "alice"
        assert templates[0].elements == template.elements

    def test_create_template_omits_id(self, client, http, json_response, template) -> None:
        """Test that the server assigns template ids."""
        new = template.copy_as_new("new-abc", owner_id=3)
        created = new.to_json_dict()
        created["id"] = 99
        http.request.return_value = json_response(201, created)

        result = PersistenceService(client).create_template(new)
        method, url, kwargs = sent(http)
        assert (method, url) == ("POST", "http://test.local/api/templates")
        assert "id" not in kwargs["json"]
        assert "authorUsername" not in kwargs["json"]
        assert result.id == "99"

    def test_create_deck_requires_name(self, client, http) -> None:
        """Test that blank deck names are rejected before any request."""
        with pytest.raises(InputValidationError):
            PersistenceService(client).create_deck("   ")
        http.request.assert_not_called()

    def test_create_deck(self, client, http, json_response) -> None:
        """Test creating a deck."""
        http.request.return_value = json_response(201, {"id": 5, "name": "Burn"})

        deck = PersistenceService(client).create_deck("  Burn ", "Fast")
        assert sent(http)[2]["json"] == {"name": "Burn", "description": "Fast"}
        assert deck.id == 5
        assert len(deck) == 0

    def test_card_payload(self, client, http, json_response, template, instant) -> None:
        """Test that saved cards carry their template snapshot."""
        http.request.return_value = json_response(201, {"id": 1})

        PersistenceService(client).add_card_to_deck(5, instant, template)
        method, url, kwargs = sent(http)
        assert url == "http://test.local/api/decks/5/cards"
        assert kwargs["json"]["card_data"]["name"] == "Counterspell"
        assert kwargs["json"]["template_data"]["id"] == "modern"

    def test_deck_with_json_cards(self, client, http, json_response, template, instant) -> None:
        """Test decoding saved cards stored as JSON strings."""
        http.request.return_value = json_response(
            200,
            {
                "id": 5,
                "name": "Blue",
                "cards": [
                    {
                        "id": 1,
                        "deck_id": 5,
                        "card_data": json.dumps(instant.to_json_dict()),
                        "template_data": json.dumps(template.to_json_dict()),
                    }
                ],
            },
        )

        deck = PersistenceService(client).get_deck(5)
        assert deck.cards[0].card_data == instant
        assert isinstance(deck.cards[0].template_data, Template)

    def test_toggle_public(self, client, http, json_response) -> None:
        """Test changing deck visibility."""
        http.request.return_value = json_response(200, {"success": True})

        PersistenceService(client).set_deck_public(5, True)
        method, url, kwargs = sent(http)
        assert (method, url) == ("PUT", "http://test.local/api/decks/5/toggle-public")
        assert kwargs["json"] == {"is_public": True}

    def test_update_card(self, client, http, json_response, template) -> None:
        """Test writing an edited card back to its deck."""
        http.request.return_value = json_response(200, {})

        PersistenceService(client).update_card_in_deck(5, 7, CardData(name="X"), template)
        method, url, _ = sent(http)
        assert (method, url) == ("PUT", "http://test.local/api/decks/5/cards/7")


class TestAssetService:
    """Test suite for AssetService."""

    def test_upload(self, client, http, json_response, image_bytes) -> None:
        """Test the multipart upload field."""
        http.request.return_value = json_response(201, {"id": 3, "url": "http://x/3.png"})
        data = image_bytes()

        asset = AssetService(client).upload_art(data)
        files = sent(http)[2]["files"]
        assert files["art"] == ("art.png", data, "image/png")
        assert asset.id == 3

    def test_upload_empty(self, client) -> None:
        """Test that empty uploads are rejected."""
        with pytest.raises(InputValidationError):
            AssetService(client).upload_art(b"")

    def test_list(self, client, http, json_response) -> None:
        """Test listing the art library."""
        http.request.return_value = json_response(200, [{"id": 1, "url": "u1"}, {"id": 2, "url": "u2"}])
        assert [a.id for a in AssetService(client).list_art()] == [1, 2]


class TestSetSymbolStore:
    """Test suite for SetSymbolStore."""

    def test_add_and_list(self, tmp_path) -> None:
        """Test that symbols persist across store instances."""
        path = tmp_path / "symbols.json"
        symbol = SetSymbolStore(path).add(" Dragons ", "data:image/png;base64,xx")

        assert symbol.name == "Dragons"
        assert symbol.id.startswith("custom-")
        assert SetSymbolStore(path).list() == [symbol]

    def test_default_location(self) -> None:
        """Test the store lives in the data directory."""
        from mtg_card_designer.config import get_settings

        assert SetSymbolStore().path.parent == get_settings().data_dir
        assert SetSymbolStore().list() == []

    @pytest.mark.parametrize("name,url", [("", "u"), ("Name", "")])
    def test_validation(self, tmp_path, name, url) -> None:
        """Test that name and image are required."""
        with pytest.raises(InputValidationError):
            SetSymbolStore(tmp_path / "s.json").add(name, url)


class TestAuth:
    """Test suite for authentication."""

    def test_user_id_from_token(self) -> None:
        """Test reading the id claim."""
        assert user_id_from_token(make_token({"id": 42, "username": "bob"})) == 42

    @pytest.mark.parametrize("token", [None, "", "garbage", "a.!!!.c", make_token({"name": "x"})])
    def test_user_id_unreadable(self, token) -> None:
        """Test tokens without a usable id."""
        assert user_id_from_token(token) is None

    def test_login(self, http, json_response) -> None:
        """Test exchanging credentials for a token."""
        http.request.return_value = json_response(200, {"accessToken": "tok"})
        auth = AuthService(ApiClient(base_url="http://test.local/api", token="", session=http))

        assert auth.login("bob", "pw") == "tok"
        method, url, kwargs = sent(http)
        assert url == "http://test.local/api/auth/login"
        assert kwargs["json"] == {"username": "bob", "password": "pw"}

    def test_login_bad_credentials(self, http, json_response) -> None:
        """Test that rejected credentials raise."""
        http.request.return_value = json_response(401, {"message": "Invalid credentials"})
        auth = AuthService(ApiClient(token="", session=http))

        with pytest.raises(SessionInvalidError, match="Invalid credentials"):
            auth.login("bob", "wrong")

    @pytest.mark.parametrize("username,password", [("", "pw"), ("bob", "")])
    def test_credentials_required(self, http, username, password) -> None:
        """Test that empty credentials are rejected locally."""
        with pytest.raises(InputValidationError):
            AuthService(ApiClient(token="", session=http)).register(username, password)
        http.request.assert_not_called()

    def test_register(self, http, json_response) -> None:
        """Test account creation."""
        http.request.return_value = json_response(201, {"message": "ok", "userId": 7})
        auth = AuthService(ApiClient(token="", session=http))
        assert auth.register("bob", "pw") == 7
