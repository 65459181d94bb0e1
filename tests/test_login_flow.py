import asyncio

from adpath.ui import LoginFlowApp


def run_flow(app, *keys, click=None):
    async def scenario():
        async with app.run_test() as pilot:
            await pilot.pause()
            if click:
                await pilot.click(click)
            else:
                await pilot.press(*keys)
            await pilot.pause()
        return app.return_value

    return asyncio.run(scenario())


def test_login_returns_credentials():
    app = LoginFlowApp(["X"], "X", "admin")

    assert run_flow(app, "p", "w", "enter") == ("X", "admin", "pw")


def test_cancel_button_cancels_login():
    app = LoginFlowApp(["X"], "X", "admin")

    assert run_flow(app, click="#cancel") is None
