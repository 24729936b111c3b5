import copy
import logging

from PySide6 import QtCore
from PySide6.QtGui import QAction, QActionGroup
from PySide6.QtWidgets import QMainWindow, QWidget, QVBoxLayout, QLabel

from vcx.app.app_settings_manager import AppSettingsManager
from vcx.core.states.orientation_state import OrientationState
from vcx.indicators.device_indicator import DeviceIndicator
from vcx.sensors.level_sensor import LevelSensor
from vcx.sensors.sensor_poller import SensorPoller
from vcx.sensors.sources import SampleSource, SimulatedGravitySource, SimulatedRotationSource
from vcx.status import STATUS_FIELDS, StatusField, angle_formatter
from vcx.utils.log_util import log_io

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Demo window showing the orientation indicator and bubble level readouts."""

    def __init__(
            self,
            settings_mgr: AppSettingsManager | None = None,
            rotation_source: SampleSource | None = None,
            gravity_source: SampleSource | None = None,
    ):
        """
        Initialize the main window.

        :param settings_mgr: Application settings manager.
        :param rotation_source: Rotation source (simulated if omitted).
        :param gravity_source: Gravity source (simulated if omitted).
        """
        super().__init__()
        self.setting = settings_mgr or AppSettingsManager()

        self.indicator = DeviceIndicator.from_settings(
            rotation_source or SimulatedRotationSource(), self.setting)
        self.level = LevelSensor.from_settings(
            gravity_source or SimulatedGravitySource(), self.setting)
        self.level.check_sensor()

        self.indicator_poller = SensorPoller(self.indicator, self)
        self.level_poller = SensorPoller(self.level, self)

        # copy per instance so formatter changes stay local
        self.status_fields: dict[str, StatusField] = {
            k: copy.deepcopy(v) for k, v in STATUS_FIELDS.items()
        }
        display = self.setting.data.display
        for key in ("pitch", "roll", "yaw"):
            self.status_fields[key].formatter = angle_formatter(display.angle_precision, display.angle_format)
        self._status_label: dict[str, QLabel | None] = {}

        self.setWindowTitle("VCX - Orientation Indicator")
        self._setup_ui()
        self._setup_menus()
        self._setup_status_bar()

        self.indicator.add_orientation_changed_callback(self._on_orientation_changed)
        self.indicator.add_alignment_changed_callback(self._on_alignment_changed)
        self.level.add_angle_changed_callback(self._on_level_angle_changed)
        self.level.add_level_reached_callback(lambda: self._update_status("level", True))
        self.level.add_level_lost_callback(lambda: self._update_status("level", False))

        self._refresh_swatch()

    def _setup_ui(self) -> None:
        """Setup the main UI layout"""
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout(central_widget)

        self.swatch = QLabel("", central_widget)
        self.swatch.setAlignment(QtCore.Qt.AlignCenter)
        self.swatch.setMinimumSize(120, 120)
        layout.addWidget(self.swatch)

        self.angles_label = QLabel("", central_widget)
        self.angles_label.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(self.angles_label)

        self.sensor_error_label = QLabel(self.level.sensor_error or "", central_widget)
        layout.addWidget(self.sensor_error_label)

        self.setGeometry(100, 100, 420, 320)

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        view_menu = menubar.addMenu("&View")
        group = QActionGroup(self)
        for target in ("portrait", "landscape"):
            action = QAction(target.title(), self, checkable=True)
            action.setChecked(target == self.indicator.target_orientation)
            action.triggered.connect(lambda checked=False, t=target: self.set_target_orientation(t))
            group.addAction(action)
            view_menu.addAction(action)

        view_menu.addSeparator()
        self.enabled_action = QAction("&Sensors enabled", self, checkable=True)
        self.enabled_action.setChecked(self.indicator.enabled)
        self.enabled_action.toggled.connect(self.set_sensors_enabled)
        view_menu.addAction(self.enabled_action)

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&Quit", self.close)

    def _setup_status_bar(self) -> None:
        status_bar = self.statusBar()
        for key, field in self.status_fields.items():
            if not field.visible:
                self._status_label[key] = None
                continue
            label = QLabel(field.text(), self)
            status_bar.addPermanentWidget(label)
            self._status_label[key] = label

    # =====================================================
    # Menu Actions
    # =====================================================

    @log_io(level=logging.INFO)
    def set_target_orientation(self, target: str) -> None:
        self.indicator.set_target_orientation(target)
        self.setting.set_target_orientation(target)
        self._update_status("aligned", False)
        self._refresh_swatch()

    @log_io(level=logging.INFO)
    def set_sensors_enabled(self, enabled: bool) -> None:
        self.indicator_poller.set_enabled(enabled)
        self.level_poller.set_enabled(enabled)

    # =====================================================
    # Callbacks
    # =====================================================

    def _on_orientation_changed(self, orientation: OrientationState) -> None:
        self._update_status("pitch", orientation.pitch)
        self._update_status("roll", orientation.roll)
        self._update_status("yaw", orientation.yaw)
        self._update_status("deviation", self.indicator.deviation_angle)
        angles = self.indicator.formatted_angles()
        self.angles_label.setText(f"P: {angles['pitch']}  R: {angles['roll']}  Y: {angles['yaw']}")

    def _on_alignment_changed(self, aligned: bool) -> None:
        self._update_status("aligned", aligned)
        self._refresh_swatch()

    def _on_level_angle_changed(self, angle: float) -> None:
        self._update_status("roll_angle", angle)

    def _refresh_swatch(self) -> None:
        self.swatch.setStyleSheet(f"background-color: {self.indicator.current_color};")

    def _update_status(self, key: str, value) -> None:
        """Update status bar label."""
        field = self.status_fields.get(key)
        if field is None:
            return
        field.value = value

        label = self._status_label.get(key)
        if label is None:
            return
        try:
            label.setText(field.text())
        except Exception as e:
            logger.warning(f"Error formatting status field {key}: {e}")
            label.setText(str(value))

    def closeEvent(self, event) -> None:
        self.indicator_poller.stop()
        self.level_poller.stop()
        super().closeEvent(event)
