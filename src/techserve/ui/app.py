"""Textual TUI entrypoint for TechServe."""

from __future__ import annotations

import httpx
from textual.app import App

from techserve.config import Settings, load_settings
from techserve.env import load_dotenv
from techserve.orders.client import OrdersClient
from techserve.orders.types import OrdersApiError
from techserve.session import build_client, open_session
from techserve.ui.screens import STEP_SCREENS
from techserve.wizard.steps import WizardSession


class TechServeApp(App):
    CSS_PATH = "styles.tcss"
    BINDINGS = [("q", "quit", "Quit")]

    def __init__(self, settings: Settings | None = None, client: OrdersClient | None = None) -> None:
        super().__init__()
        if settings is None:
            load_dotenv()
            settings = load_settings()
        self.settings = settings
        self.client = client or build_client(settings)
        self.session: WizardSession | None = None

    async def on_mount(self) -> None:
        try:
            setup = await open_session(self.client, self.settings)
        except (OrdersApiError, httpx.HTTPError, ValueError) as exc:
            self.exit(return_code=1, message=f"Could not load the catalog: {exc}")
            return
        self.session = setup.session
        for warning in setup.warnings:
            self.notify(warning, severity="warning")
        self.show_step()

    async def on_unmount(self) -> None:
        await self.client.aclose()

    def advance(self) -> None:
        result = self.session.navigator.forward()
        if not result.applied:
            self.notify(result.reason or "Cannot continue yet.", severity="warning")
            return
        self.show_step()

    def retreat(self) -> None:
        result = self.session.navigator.backward()
        if result.applied:
            self.show_step()

    def show_step(self) -> None:
        screen = STEP_SCREENS[self.session.navigator.current](self.session)
        if len(self.screen_stack) > 1:
            self.switch_screen(screen)
        else:
            self.push_screen(screen)


def run_app(settings: Settings | None = None) -> int:
    app = TechServeApp(settings)
    app.run()
    return app.return_code or 0
