"""
Tests for session identity extraction and the ownership policy.
"""
import pytest
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import Mock
from jose import jwt

from services.auth import create_session_token, decode_session_token, get_session_identity, require_session
from services.authorization import (
    ActionType, OwnershipChecker, is_allowed, content_author,
    photo_delete_checker, comment_edit_checker
)
from services.errors import NotFoundOrForbiddenError, UnauthorizedError
from services.identity import new_identity
from services.security import security_config

OWNER = new_identity()
OTHER = new_identity()

class TestPolicy:

    def test_no_session_is_never_allowed(self):
        for action in ActionType:
            assert is_allowed(action, None, OWNER) is False

    def test_any_session_may_read_galleries_and_create(self):
        assert is_allowed(ActionType.READ_GALLERY, OTHER) is True
        assert is_allowed(ActionType.CREATE, OTHER) is True

    @pytest.mark.parametrize("action", [ActionType.EDIT, ActionType.DELETE])
    def test_mutation_requires_ownership(self, action):
        assert is_allowed(action, OWNER, OWNER) is True
        assert is_allowed(action, OTHER, OWNER) is False
        assert is_allowed(action, OWNER, None) is False

    def test_content_author_is_session_identity(self):
        assert content_author(OWNER) == OWNER
        with pytest.raises(UnauthorizedError):
            content_author(None)

    def test_checker_rejects_non_mutating_actions(self):
        with pytest.raises(ValueError):
            OwnershipChecker("Photo", ActionType.READ_GALLERY)

class TestOwnershipChecker:

    def test_owner_passes(self, mock_request):
        photo = SimpleNamespace(user_id=OWNER)
        assert photo_delete_checker.enforce(mock_request, OWNER, photo) is photo

    def test_missing_and_foreign_are_indistinguishable(self, mock_request):
        foreign = SimpleNamespace(user_id=OWNER)

        with pytest.raises(NotFoundOrForbiddenError) as missing:
            comment_edit_checker.enforce(mock_request, OTHER, None, new_identity())
        with pytest.raises(NotFoundOrForbiddenError) as not_owner:
            comment_edit_checker.enforce(mock_request, OTHER, foreign, new_identity())

        assert missing.value.to_dict() == not_owner.value.to_dict()
        assert missing.value.status_code == not_owner.value.status_code == 404
        assert missing.value.message == "Comment not found or you do not have permission to edit it"

    def test_no_session_is_unauthorized_not_forbidden(self, mock_request):
        with pytest.raises(UnauthorizedError) as exc_info:
            photo_delete_checker.enforce(mock_request, None, SimpleNamespace(user_id=OWNER))
        assert exc_info.value.status_code == 401

    def test_deny_matches_enforce_outcome(self, mock_request):
        with pytest.raises(NotFoundOrForbiddenError) as enforced:
            photo_delete_checker.enforce(mock_request, OTHER, None)
        assert photo_delete_checker.deny().to_dict() == enforced.value.to_dict()

class TestSessionTokens:

    def test_round_trip(self):
        assert decode_session_token(create_session_token(OWNER)) == OWNER

    def test_expired_token_has_no_identity(self):
        token = create_session_token(OWNER, expires_delta=timedelta(minutes=-1))
        assert decode_session_token(token) is None

    def test_wrong_signature_has_no_identity(self):
        token = jwt.encode({"sub": OWNER, "type": "session"}, "x" * 64, algorithm="HS256")
        assert decode_session_token(token) is None

    def test_wrong_type_or_subject_has_no_identity(self):
        key, alg = security_config.session_secret_key, security_config.session_algorithm
        assert decode_session_token(jwt.encode({"sub": OWNER, "type": "refresh"}, key, algorithm=alg)) is None
        assert decode_session_token(jwt.encode({"sub": "admin", "type": "session"}, key, algorithm=alg)) is None

    def test_garbage_token(self):
        assert decode_session_token("not.a.token") is None

@pytest.mark.asyncio
class TestSessionDependencies:

    def _request(self, cookies=None):
        request = Mock()
        request.cookies = cookies or {}
        request.url.path = "/api/photo/x"
        request.method = "GET"
        request.headers = {}
        request.client.host = "127.0.0.1"
        return request

    async def test_bearer_token_wins(self):
        request = self._request({security_config.session_cookie_name: create_session_token(OTHER)})
        assert await get_session_identity(request, create_session_token(OWNER)) == OWNER

    async def test_cookie_fallback(self):
        request = self._request({security_config.session_cookie_name: create_session_token(OWNER)})
        assert await get_session_identity(request, None) == OWNER

    async def test_no_token_no_identity(self):
        assert await get_session_identity(self._request(), None) is None

    async def test_require_session_raises_unauthorized(self):
        with pytest.raises(UnauthorizedError):
            await require_session(self._request(), None)
        assert await require_session(self._request(), OWNER) == OWNER
