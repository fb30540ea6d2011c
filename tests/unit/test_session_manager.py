import datetime

import pytest

from jxauth.core.game import GameSessionClient
from jxauth.core.oauth import (
    AuthorizationFlow,
    HttpError,
    InMemorySessionStore,
    MockHttpClient,
    OAuthConfig,
    ReauthRequiredError,
    SessionError,
    SessionManager,
    SessionState,
    StorageError,
    StorageErrorKind,
    TokenExchanger,
    TransientTokenError,
    ValidationError,
)
from tests.fixtures.sessions import T0, ScriptedSurface, make_session, token_response


def network_error():
    return HttpError(status_code=0, reason="connection refused", body="", url="https://account.jagex.com/oauth2/token")


@pytest.fixture
def surface():
    return ScriptedSurface.approving("abc123")


@pytest.fixture
def flow(surface):
    return AuthorizationFlow(OAuthConfig(), surface)


@pytest.fixture
def make_manager(exchanger, game_client, clock):
    def _make(store, flow=None, **kwargs):
        return SessionManager(store, exchanger, game_client, flow, clock=clock, **kwargs)

    return _make


@pytest.mark.unit
class TestValidSession:
    def test_no_network_call_when_valid(self, make_manager, token_http, game_http):
        manager = make_manager(InMemorySessionStore(make_session()))

        assert manager.ensure_valid_session() == "S1"
        assert manager.state is SessionState.VALID
        assert token_http.requests == []
        assert game_http.requests == []

    def test_session_inside_margin_is_refreshed(self, make_manager, token_http, clock):
        clock.advance(3600 - 299)
        token_http.replies.append((200, token_response("AT2", "RT2")))
        manager = make_manager(InMemorySessionStore(make_session()))

        manager.ensure_valid_session()
        assert len(token_http.requests) == 1

    def test_custom_margin(self, make_manager, token_http, clock):
        clock.advance(3600 - 299)
        manager = make_manager(InMemorySessionStore(make_session()), expiry_margin=60)

        manager.ensure_valid_session()
        assert token_http.requests == []


@pytest.mark.unit
class TestFirstLogin:
    def test_login_scenario(self, make_manager, flow, token_http, game_http, clock):
        """No session, code abc123, tokens AT1/RT1 with a one hour lifetime."""
        store = InMemorySessionStore()
        token_http.replies.append((200, token_response("AT1", "RT1", expires_in=3600)))
        manager = make_manager(store, flow)

        assert manager.ensure_valid_session() == "S1"

        session = store.load()
        assert session.tokens.access_token == "AT1"
        assert session.tokens.refresh_token == "RT1"
        assert session.expires_at == T0 + datetime.timedelta(seconds=3600)
        assert session.is_valid(clock(), 300)
        assert manager.state is SessionState.VALID

        assert b"code=abc123" in token_http.requests[0]["data"]
        assert game_http.requests[0]["url"].endswith("/sessions")

    def test_non_interactive_without_session(self, make_manager, token_http):
        manager = make_manager(InMemorySessionStore())

        with pytest.raises(ReauthRequiredError):
            manager.ensure_valid_session()
        assert manager.state is SessionState.UNAUTHENTICATED
        assert token_http.requests == []

    def test_state_mismatch_never_reaches_token_endpoint(self, make_manager, token_http):
        forged = ScriptedSurface(lambda p: f"{p['redirect_uri']}?code=abc123&state=forged")
        store = InMemorySessionStore()
        manager = make_manager(store, AuthorizationFlow(OAuthConfig(), forged))

        with pytest.raises(SessionError):
            manager.ensure_valid_session()
        assert token_http.requests == []
        assert store.load() is None
        assert manager.state is SessionState.UNAUTHENTICATED

    def test_cancelled_login(self, make_manager, token_http):
        manager = make_manager(InMemorySessionStore(), AuthorizationFlow(OAuthConfig(), ScriptedSurface(lambda p: None)))

        with pytest.raises(SessionError) as exc_info:
            manager.ensure_valid_session()
        assert not exc_info.value.retriable
        assert token_http.requests == []

    def test_exchange_failure_saves_nothing(self, make_manager, flow, token_http):
        store = InMemorySessionStore()
        token_http.replies.append((503, {"error": "temporarily_unavailable"}))
        manager = make_manager(store, flow)

        with pytest.raises(SessionError) as exc_info:
            manager.ensure_valid_session()
        assert exc_info.value.retriable
        assert isinstance(exc_info.value.__cause__, TransientTokenError)
        assert store.save_count == 0
        assert manager.state is SessionState.UNAUTHENTICATED

    def test_missing_id_token_is_an_error(self, make_manager, flow, token_http):
        store = InMemorySessionStore()
        token_http.replies.append((200, {"access_token": "AT1", "refresh_token": "RT1", "expires_in": 3600}))

        with pytest.raises(SessionError):
            make_manager(store, flow).ensure_valid_session()
        assert store.save_count == 0

    def test_authorize_replaces_a_valid_session(self, make_manager, flow, token_http):
        store = InMemorySessionStore(make_session(access_token="OLD"))
        token_http.replies.append((200, token_response("AT1", "RT1")))

        make_manager(store, flow).authorize()
        assert store.load().tokens.access_token == "AT1"


@pytest.mark.unit
class TestRefresh:
    def test_refresh_scenario(self, make_manager, token_http, game_http, clock):
        """Expired ten minutes ago with RT1; refresh yields AT2/RT2."""
        clock.advance(3600 + 600)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((200, token_response("AT2", "RT2", id_token="ID2")))
        game_http.json_response = {"sessionId": "S2"}
        manager = make_manager(store)

        assert manager.ensure_valid_session() == "S2"
        assert manager.state is SessionState.VALID
        assert b"refresh_token=RT1" in token_http.requests[0]["data"]
        assert store.load().tokens.refresh_token == "RT2"
        assert store.load().expires_at == clock() + datetime.timedelta(seconds=3600)

        # A second call is served from the store
        assert manager.ensure_valid_session() == "S2"
        assert len(token_http.requests) == 1
        assert len(game_http.requests) == 1

    def test_exactly_one_refresh_per_expired_session(self, make_manager, token_http, clock):
        clock.advance(7200)
        token_http.replies.append((200, token_response("AT2", "RT2")))
        manager = make_manager(InMemorySessionStore(make_session()))

        manager.ensure_valid_session()
        manager.ensure_valid_session()
        assert len(token_http.requests) == 1

    def test_terminal_rejection_clears_store(self, make_manager, token_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((400, {"error": "invalid_grant"}))
        manager = make_manager(store)

        with pytest.raises(ReauthRequiredError):
            manager.ensure_valid_session()
        assert store.load() is None
        assert store.clear_count == 1
        assert manager.state is SessionState.REAUTH_REQUIRED

    def test_after_rejection_next_call_is_a_first_run(self, make_manager, flow, token_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((400, {"error": "invalid_grant"}))
        with pytest.raises(ReauthRequiredError):
            make_manager(store).ensure_valid_session()

        token_http.replies.append((200, token_response("AT3", "RT3")))
        manager = make_manager(store, flow)
        assert manager.ensure_valid_session() == "S1"
        assert store.load().tokens.access_token == "AT3"
        assert b"grant_type=authorization_code" in token_http.requests[-1]["data"]

    def test_rejection_with_flow_logs_in_again(self, make_manager, flow, token_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.extend([(401, {"error": "invalid_grant"}), (200, token_response("AT3", "RT3"))])

        make_manager(store, flow).ensure_valid_session()
        assert store.load().tokens.access_token == "AT3"

    @pytest.mark.parametrize("reply", [(503, {}), (429, {}), network_error()])
    def test_transient_failure_keeps_store(self, make_manager, token_http, clock, reply):
        clock.advance(7200)
        original = make_session()
        store = InMemorySessionStore(original)
        token_http.replies.append(reply)
        manager = make_manager(store)

        with pytest.raises(SessionError) as exc_info:
            manager.ensure_valid_session()
        assert exc_info.value.retriable
        assert store.load() == original
        assert store.save_count == 0
        assert store.clear_count == 0
        assert manager.state is SessionState.EXPIRED

    def test_game_server_outage_during_refresh_keeps_rotated_tokens(self, make_manager, token_http, game_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((200, token_response("AT2", "RT2")))
        game_http.replies.append((502, {}))
        manager = make_manager(store)

        with pytest.raises(SessionError) as exc_info:
            manager.ensure_valid_session()
        assert exc_info.value.retriable
        assert manager.state is SessionState.EXPIRED

        stored = store.load()
        assert stored.tokens.refresh_token == "RT2"
        assert stored.session_pending
        assert manager.describe().state is SessionState.EXPIRED

    def test_pending_game_session_is_created_without_refreshing(self, make_manager, token_http, game_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((200, token_response("AT2", "RT2", id_token="ID2")))
        game_http.replies.extend([(503, {}), (200, {"sessionId": "S2"})])
        manager = make_manager(store)
        with pytest.raises(SessionError):
            manager.ensure_valid_session()

        assert manager.ensure_valid_session() == "S2"
        assert manager.state is SessionState.VALID
        assert len(token_http.requests) == 1
        assert b"ID2" in game_http.requests[-1]["data"]
        stored = store.load()
        assert (stored.session_id, stored.session_pending) == ("S2", False)
        assert stored.tokens.refresh_token == "RT2"

    def test_save_failure_after_refresh_is_a_session_error(self, make_manager, token_http, clock):
        clock.advance(7200)

        class ReadOnlyStore(InMemorySessionStore):
            def save(self, session):
                raise StorageError(StorageErrorKind.WRITE, "Cannot write session file: read-only file system")

        token_http.replies.append((200, token_response("AT2", "RT2")))
        manager = make_manager(ReadOnlyStore(make_session()))

        with pytest.raises(SessionError) as exc_info:
            manager.ensure_valid_session()
        assert isinstance(exc_info.value.__cause__, StorageError)
        assert manager.state is SessionState.EXPIRED

    def test_game_session_rejected_during_refresh_requires_login(self, make_manager, token_http, game_http, clock):
        clock.advance(7200)
        store = InMemorySessionStore(make_session())
        token_http.replies.append((200, token_response("AT2", "RT2")))
        game_http.replies.append((401, {}))
        manager = make_manager(store)

        with pytest.raises(ReauthRequiredError):
            manager.ensure_valid_session()
        assert store.load() is None
        assert manager.state is SessionState.REAUTH_REQUIRED

    def test_concurrent_refresh_is_reused(self, exchanger, game_client, token_http, clock):
        """Another process refreshed while we waited for the lock."""
        clock.advance(7200)
        fresh = make_session(issued_at=clock(), access_token="AT2", session_id="S2")

        class RacingStore(InMemorySessionStore):
            loads = 0

            def load(self):
                self.loads += 1
                if self.loads == 2:
                    self._session = fresh
                return super().load()

        manager = SessionManager(RacingStore(make_session()), exchanger, game_client, clock=clock)
        assert manager.ensure_valid_session() == "S2"
        assert token_http.requests == []


@pytest.mark.unit
class TestLogoutAndDescribe:
    def test_logout_clears(self, make_manager):
        store = InMemorySessionStore(make_session())
        manager = make_manager(store)
        manager.logout()
        assert store.load() is None
        assert manager.state is SessionState.UNAUTHENTICATED

    def test_describe_makes_no_network_calls(self, make_manager, token_http, clock):
        manager = make_manager(InMemorySessionStore(make_session()))
        status = manager.describe()
        assert status.state is SessionState.VALID
        assert status.expires_at == T0 + datetime.timedelta(seconds=3600)

        clock.advance(7200)
        assert manager.describe().state is SessionState.EXPIRED
        assert token_http.requests == []

    def test_describe_without_session(self, make_manager):
        assert make_manager(InMemorySessionStore()).describe().state is SessionState.UNAUTHENTICATED


@pytest.mark.unit
def test_rejects_non_store():
    with pytest.raises(ValidationError):
        SessionManager(object(), TokenExchanger(MockHttpClient()), GameSessionClient(MockHttpClient()))
