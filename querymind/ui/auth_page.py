"""Sign-in / sign-up page backed by the configured AuthProvider."""

from nicegui import ui

from querymind.client.auth import AuthState
from querymind.ui.chat_page import CUSTOM_CSS, get_auth_provider


@ui.page("/auth")
async def auth_page() -> None:
    """Email/password form toggling between sign-in and sign-up."""
    ui.add_head_html(CUSTOM_CSS)
    ui.dark_mode(True)

    provider = get_auth_provider()
    if provider is None:
        ui.navigate.to("/")
        return

    auth = AuthState(provider)
    mode = {"sign_up": False}

    async def submit() -> None:
        email = (email_input.value or "").strip()
        password = password_input.value or ""
        if not email or not password:
            ui.notify("Email and password are required", type="warning")
            return
        if mode["sign_up"] and password != confirm_input.value:
            ui.notify("Passwords do not match", type="warning")
            return

        submit_btn.disable()
        try:
            if mode["sign_up"]:
                result = await auth.sign_up(email, password)
            else:
                result = await auth.sign_in(email, password)
        finally:
            submit_btn.enable()

        if not result.success:
            ui.notify(result.error or "Authentication failed", type="negative")
            return
        ui.navigate.to("/")

    def toggle_mode() -> None:
        mode["sign_up"] = not mode["sign_up"]
        title.set_text("Create account" if mode["sign_up"] else "Welcome back")
        submit_btn.set_text("Sign up" if mode["sign_up"] else "Sign in")
        toggle_btn.set_text(
            "Already have an account? Sign in"
            if mode["sign_up"]
            else "Don't have an account? Sign up"
        )
        confirm_input.set_visibility(mode["sign_up"])

    with ui.column().classes("w-full h-screen items-center justify-center"):
        with ui.card().classes("w-96 p-6 gap-4"):
            ui.label("QueryMind").classes("text-2xl font-semibold text-indigo-500")
            title = ui.label("Welcome back").classes("text-lg")
            email_input = ui.input("Email").props("type=email outlined").classes("w-full")
            password_input = ui.input(
                "Password", password=True, password_toggle_button=True
            ).props("outlined").classes("w-full")
            confirm_input = ui.input("Confirm password", password=True).props("outlined").classes(
                "w-full"
            )
            confirm_input.set_visibility(False)
            submit_btn = ui.button("Sign in", on_click=submit).props("unelevated color=indigo").classes(
                "w-full"
            )
            toggle_btn = ui.button("Don't have an account? Sign up", on_click=toggle_mode).props(
                "flat no-caps color=grey"
            )
