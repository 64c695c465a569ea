"""
Poseplay
========
Pose-driven particle animation.

Flow:
- Calibration page: raise each hand above your head three times
- Animation page: hand raises and body lean spawn particles and ripples

Press Q (or close the window) to quit, F11 for fullscreen.
"""

import argparse
import logging
import time
from typing import Optional

import numpy as np

from poseplay.core.calibration import CalibrationCounter
from poseplay.core.display import AnimationDisplay, Keys
from poseplay.core.pose_engine import CameraSource, DetectionLoop, MediaPipePoseSource, PoseConfig
from poseplay.core.scene_manager import SceneManager
from poseplay.scenes.animation_scene import AnimationScene
from poseplay.scenes.calibration_scene import CalibrationScene
from poseplay.systems.animation import AnimationEngine
from poseplay.ui.hud import StatusHUD
from poseplay.ui.settings import AppSettings

logger = logging.getLogger(__name__)


class PoseplayApp:
    """Main app: window, detection loop and the two pages."""

    def __init__(self, settings: Optional[AppSettings] = None,
                 settings_path: str = "settings.json", debug: bool = False):
        self.settings_path = settings_path
        self.settings = settings or AppSettings.load(settings_path)
        det = self.settings.detection
        anim = self.settings.animation
        disp = self.settings.display

        config = PoseConfig()
        config.CAMERA_INDEX = det.camera_index
        config.CAMERA_WIDTH = det.camera_width
        config.CAMERA_HEIGHT = det.camera_height

        self.display = AnimationDisplay(disp.resolution, title="Poseplay",
                                        fullscreen=disp.fullscreen, max_fps=disp.max_fps)
        self.width, self.height = self.display.size

        # Whatever was opened before a startup failure is released again
        try:
            camera = CameraSource(config.CAMERA_INDEX, config.CAMERA_WIDTH, config.CAMERA_HEIGHT)
            try:
                pose_source = MediaPipePoseSource(config)
            except Exception:
                camera.release()
                raise
        except Exception:
            self.display.close()
            raise
        self.loop = DetectionLoop(camera, pose_source, interval=det.calibration_interval)

        self.counter = CalibrationCounter(det.required_raises, det.raise_cooldown)
        self.engine = AnimationEngine(self.width, self.height, theme=anim.theme,
                                      max_particles=anim.max_particles,
                                      max_ripples=anim.max_ripples,
                                      effect_cooldown=anim.effect_cooldown,
                                      show_cursors=anim.show_wrist_cursors)

        self.calibration_scene = CalibrationScene(self.counter, debug=debug)
        self.calibration_scene.detection_interval = det.calibration_interval
        self.animation_scene = AnimationScene(self.engine, self.counter, StatusHUD(),
                                              show_preview=disp.show_camera_preview,
                                              pip_size=disp.pip_size)
        self.animation_scene.detection_interval = det.animation_interval

        self.manager = SceneManager(self.width, self.height)
        self.manager.add_scene("calibration", self.calibration_scene)
        self.manager.add_scene("animation", self.animation_scene)

    def _store_settings(self):
        """Copy runtime toggles back into the settings before saving."""
        self.settings.animation.theme = self.engine.theme.value
        self.settings.animation.show_wrist_cursors = self.engine.cursors.enabled
        self.settings.display.show_camera_preview = self.animation_scene.show_preview
        self.settings.display.fullscreen = self.display.fullscreen
        self.settings.display.resolution = self.display.windowed_size

    def run(self, start_scene: str = "calibration"):
        self.manager.set_scene(start_scene)
        self.loop.start()
        last_time = time.monotonic()

        try:
            while self.display.open:
                events = self.display.poll()
                if events.quit:
                    break

                if events.resized:
                    self.width, self.height = events.resized
                    self.manager.resize(self.width, self.height)

                if Keys.Q in events.keys:
                    break
                for key in events.keys:
                    self.manager.handle_key(key)

                scene = self.manager.scene
                if scene is not None and self.loop.interval != scene.detection_interval:
                    self.loop.set_interval(scene.detection_interval)

                now = time.monotonic()
                delta_time = now - last_time
                last_time = now

                self.animation_scene.fps = self.display.fps
                self.animation_scene.skipped_ticks = self.loop.skipped_ticks
                self.manager.update(self.loop.latest(), delta_time)

                frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
                self.manager.render(frame)
                self.display.present(frame)
        finally:
            self._store_settings()
            self.settings.save(self.settings_path)
            self.loop.stop()
            self.display.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Pose-driven particle animation")
    parser.add_argument('--settings', default="settings.json", help="Settings file")
    parser.add_argument('--camera', type=int, default=None, help="Camera index")
    parser.add_argument('--theme', default=None,
                        choices=['particles', 'ripples', 'fireworks', 'flowers'])
    parser.add_argument('--skip-calibration', action='store_true',
                        help="Start on the animation page")
    parser.add_argument('--debug', action='store_true', help="Show keypoint labels")
    parser.add_argument('--verbose', '-v', action='store_true', help="Debug logging")
    args = parser.parse_args(argv)

    settings = AppSettings.load(args.settings)
    if args.camera is not None:
        settings.detection.camera_index = args.camera
    if args.theme is not None:
        settings.animation.theme = args.theme

    level = logging.DEBUG if args.verbose else getattr(logging, settings.display.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    print("=" * 50)
    print("POSEPLAY")
    print("=" * 50)
    print("Controls:")
    print("  • Raise hands above your head: calibrate / trigger effects")
    print("  • ENTER: Start animation (once calibrated)")
    print("  • 1-4 / T: Theme    SPACE: Play/Pause")
    print("  • C: Wrist cursors  V: Camera preview  H: HUD")
    print("  • R: Reset calibration  B: Back  F11: Fullscreen  Q: Quit")
    print("=" * 50)

    app = PoseplayApp(settings, settings_path=args.settings, debug=args.debug)
    app.run("animation" if args.skip_calibration else "calibration")


if __name__ == "__main__":
    main()
