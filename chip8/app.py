# Windowed front end.
# We subclass pyglet's Window (it handles graphics and keyboard) and override the
# event handlers we need; the interpreter itself never touches pyglet.

import argparse
import sys

import numpy as np
import pyglet
from pyglet.window import key

from . import config
from .config import cpu_hz, scale, window_height, window_width
from .errors import Chip8Error, LoadError
from .interpreter import Interpreter

#map binding keys
keymap = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


def frame_to_rgba(display, pixel_scale=scale):
    """Turn the (height, width) 0/1 frame buffer into upscaled RGBA bytes.

    Rows are flipped because pyglet images start at the bottom-left.
    """
    small = np.zeros(display.shape + (4,), dtype=np.uint8)
    small[..., :3] = display[::-1, :, np.newaxis] * 255
    small[..., 3] = 255
    if pixel_scale != 1:
        small = np.repeat(np.repeat(small, pixel_scale, axis=0), pixel_scale, axis=1)
    return small.tobytes()


class Chip8Window(pyglet.window.Window):

    def __init__(self, interpreter, rom_name=""):
        super().__init__(
            width=window_width,
            height=window_height,
            caption="CHIP-8 Emulator - %s" % rom_name if rom_name else "CHIP-8 Emulator",
            resizable=False,
            vsync=False
        )
        self.interpreter = interpreter
        self.has_exit = False

        #creating ImageData once, updated in place on every redraw
        self.image = pyglet.image.ImageData(
            window_width,
            window_height,
            'RGBA',
            frame_to_rgba(self.interpreter.machine.display)
        )

        # Performance tracking
        self.cycle_count = 0
        self.cps_label = pyglet.text.Label(
            "Cycles/s: 0",
            font_size=12,
            x=5,
            y=window_height - 15,
            anchor_x='left',
            anchor_y='center',
            color=(255, 255, 255, 255)
        )

        pyglet.clock.schedule_interval(self._update_cps, 1.0)
        pyglet.clock.schedule_interval(self._cpu_tick, 1.0 / cpu_hz)

    def _update_cps(self, dt):
        self.cps_label.text = f"Cycles/s: {self.cycle_count}"
        self.cycle_count = 0

    # ---- CPU cycle ----
    def _cpu_tick(self, dt):
        if self.has_exit:
            return
        try:
            self.interpreter.step()
        except Chip8Error as e:
            print("Emulation error:", e)
            self.close()
            return
        self.cycle_count += 1

    def close(self):
        self.has_exit = True
        pyglet.clock.unschedule(self._cpu_tick)
        pyglet.clock.unschedule(self._update_cps)
        super().close()

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol == key.F1:
            config.logs_on = not config.logs_on
            print("logs_on:", config.logs_on)
        elif symbol in keymap:
            self.interpreter.set_key(keymap[symbol], True)

    def on_key_release(self, symbol, modifiers):
        if symbol in keymap:
            self.interpreter.set_key(keymap[symbol], False)

    # ---- Drawing ----
    def on_draw(self):
        if self.interpreter.take_draw_flag():
            self.image.set_data('RGBA', window_width * 4,
                                frame_to_rgba(self.interpreter.machine.display))
        self.clear()
        self.image.blit(0, 0)
        self.cps_label.draw()


# ---- Entry point ----
def main(argv=None):
    parser = argparse.ArgumentParser(prog="chip8", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path to a raw CHIP-8 program image")
    parser.add_argument("--logs", action="store_true", help="print every decoded instruction")
    args = parser.parse_args(argv)

    config.logs_on = args.logs

    interpreter = Interpreter()
    try:
        interpreter.load_file(args.rom)
    except LoadError as e:
        print("Failed to load ROM:", e, file=sys.stderr)
        return 1

    Chip8Window(interpreter, args.rom)
    pyglet.app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
