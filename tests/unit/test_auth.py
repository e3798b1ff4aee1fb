"""Unit tests for the auth boundary and display helpers."""

import pytest
import pytest_check as check

from querymind.client.auth import (
    AuthResult,
    AuthState,
    AuthUser,
    extract_name_from_email,
    get_initials,
)

USER = AuthUser(id="u1", email="jane.doe@example.com")


class FakeProvider:
    """In-memory provider accepting a single password."""

    def __init__(self, signed_in: bool = False) -> None:
        self.user = USER if signed_in else None

    async def sign_in(self, email: str, password: str) -> AuthResult:
        if password != "secret":
            return AuthResult(success=False, error="Invalid login credentials")
        self.user = USER
        return AuthResult(success=True, user=USER)

    async def sign_up(self, email: str, password: str) -> AuthResult:
        return AuthResult(success=True, user=AuthUser(id="u2", email=email))

    async def sign_out(self) -> AuthResult:
        self.user = None
        return AuthResult(success=True)

    async def current_user(self) -> AuthUser | None:
        return self.user


class TestAuthState:
    """Tests for AuthState transitions."""

    async def test_starts_loading_until_refresh(self) -> None:
        state = AuthState(FakeProvider(signed_in=True))

        check.is_true(state.loading)
        user = await state.refresh()
        check.equal(user, USER)
        check.is_false(state.loading)

    async def test_sign_in_sets_user(self) -> None:
        state = AuthState(FakeProvider())

        result = await state.sign_in(USER.email, "secret")

        check.is_true(result.success)
        check.equal(state.user, USER)
        check.is_false(state.loading)

    async def test_failed_sign_in_keeps_user_empty(self) -> None:
        state = AuthState(FakeProvider())

        result = await state.sign_in(USER.email, "wrong")

        check.is_false(result.success)
        check.equal(result.error, "Invalid login credentials")
        check.is_none(state.user)

    async def test_sign_up(self) -> None:
        state = AuthState(FakeProvider())

        await state.sign_up("new@example.com", "pw")

        assert state.user.email == "new@example.com"

    async def test_sign_out_clears_user(self) -> None:
        state = AuthState(FakeProvider(signed_in=True))
        await state.refresh()

        await state.sign_out()

        assert state.user is None


class TestDisplayHelpers:
    """Tests for name and initials helpers."""

    @pytest.mark.parametrize(
        ("email", "expected"),
        [
            ("jane.doe@example.com", "Jane Doe"),
            ("john_smith@example.com", "John Smith"),
            ("mary-ann@example.com", "Mary Ann"),
            ("ALICE@example.com", "Alice"),
        ],
    )
    def test_extract_name_from_email(self, email: str, expected: str) -> None:
        assert extract_name_from_email(email) == expected

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("Jane Doe", "JD"), ("alice", "A"), ("Mary Ann Lee", "MA"), ("", "")],
    )
    def test_get_initials(self, name: str, expected: str) -> None:
        assert get_initials(name) == expected

    def test_initials_from_email_name(self) -> None:
        """Avatar initials come from the display name, not the raw address."""
        assert get_initials(extract_name_from_email("jane.doe@example.com")) == "JD"
