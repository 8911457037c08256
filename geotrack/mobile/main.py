import logging
import threading

from kivy.app import App
from kivy.clock import Clock, mainthread
from kivy.lang import Builder
from kivy.properties import BooleanProperty, StringProperty
from kivy.uix.boxlayout import BoxLayout
from kivy.uix.button import Button as KivyButton
from kivy.uix.label import Label
from kivy.uix.popup import Popup

from .background import BackgroundService
from .config import load_config, task_options
from .location import PositionProvider
from .storage import TrackingStateStore
from .sync_manager import LocationApiClient
from .tracking import TrackingController


logger = logging.getLogger(__name__)

KV = """
<RootLayout>:
    orientation: 'vertical'
    padding: dp(16)
    spacing: dp(12)

    Label:
        text: 'Latitude: ' + app.latitude_text
    Label:
        text: 'Longitude: ' + app.longitude_text

    Button:
        size_hint_y: None
        height: dp(48)
        text: 'Stop Tracking' if app.tracking else 'Start Tracking'
        on_release: app.toggle_tracking()

    Button:
        size_hint_y: None
        height: dp(48)
        text: 'Fetch Location'
        on_release: app.fetch_locations()

    Button:
        size_hint_y: None
        height: dp(48)
        text: 'Delete Location'
        on_release: app.delete_locations()
"""

PERMISSION_PROMPT = (
    "This app requires location permissions to track your location. "
    "Do you want to grant permissions?"
)


def format_coordinate(value) -> str:
    return "N/A" if value is None else str(value)


class RootLayout(BoxLayout):
    pass


class GeoTrackApp(App):
    latitude_text = StringProperty("N/A")
    longitude_text = StringProperty("N/A")
    tracking = BooleanProperty(False)

    def build(self):
        Builder.load_string(KV)
        cfg = load_config(self.user_data_dir)
        if not cfg["server_base_url"]:
            logger.warning("No server URL configured; uploads will fail")
        self._action_lock = threading.Lock()
        self.positions = PositionProvider()
        self.controller = TrackingController(
            api=LocationApiClient(cfg["server_base_url"], timeout=cfg["request_timeout"]),
            positions=self.positions,
            store=TrackingStateStore(self.user_data_dir),
            service=BackgroundService(),
            alert=self.show_alert,
            on_position=self._show_position,
            on_tracking_changed=self._show_tracking,
            options=task_options(cfg),
            position_timeout=cfg["position_timeout"],
            position_maximum_age=cfg["position_maximum_age"],
        )
        return RootLayout()

    def on_start(self):
        Clock.schedule_once(lambda *_: self.show_permission_prompt(), 0)
        self._in_background(self.controller.restore)

    def on_pause(self):
        # Keep the process alive so the tracking loop continues
        return True

    def on_stop(self):
        self.positions.stop_observing()

    def _in_background(self, action):
        def _run():
            with self._action_lock:
                action()

        threading.Thread(target=_run, daemon=True).start()

    # --- Button handlers ---
    def toggle_tracking(self):
        self._in_background(self.controller.toggle)

    def fetch_locations(self):
        self._in_background(self.controller.fetch_locations)

    def delete_locations(self):
        self._in_background(self.controller.delete_locations)

    # --- UI updates from worker threads ---
    @mainthread
    def _show_position(self, position):
        self.latitude_text = format_coordinate(position.latitude)
        self.longitude_text = format_coordinate(position.longitude)

    @mainthread
    def _show_tracking(self, value):
        self.tracking = value

    @mainthread
    def show_alert(self, title, message):
        container = BoxLayout(orientation="vertical", padding=8, spacing=8)
        content = Label(text=message, halign="center", valign="middle")
        content.bind(size=lambda w, s: setattr(w, "text_size", s))
        ok_btn = KivyButton(text="OK", size_hint_y=None, height=48)
        container.add_widget(content)
        container.add_widget(ok_btn)
        popup = Popup(title=title, content=container, size_hint=(0.85, 0.5), auto_dismiss=False)
        ok_btn.bind(on_release=lambda *_: popup.dismiss())
        popup.open()

    def show_permission_prompt(self):
        container = BoxLayout(orientation="vertical", padding=8, spacing=8)
        content = Label(text=PERMISSION_PROMPT, halign="center", valign="middle")
        content.bind(size=lambda w, s: setattr(w, "text_size", s))
        container.add_widget(content)

        btns = BoxLayout(spacing=8, size_hint_y=None, height=48)
        no_btn = KivyButton(text="No")
        yes_btn = KivyButton(text="Yes")
        btns.add_widget(no_btn)
        btns.add_widget(yes_btn)
        container.add_widget(btns)

        popup = Popup(title="Location Permission", content=container, size_hint=(0.9, 0.5), auto_dismiss=False)

        def _declined(*_):
            logger.info("User denied location permissions.")
            popup.dismiss()

        def _accepted(*_):
            popup.dismiss()
            self._in_background(self.controller.confirm_permission)

        no_btn.bind(on_release=_declined)
        yes_btn.bind(on_release=_accepted)
        popup.open()


def main():
    GeoTrackApp().run()


if __name__ == "__main__":
    main()
