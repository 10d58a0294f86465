# SPDX-FileCopyrightText: 2025 Justin Blanchard <UncombedCoconut@gmail.com>
# SPDX-License-Identifier: Apache-2.0 OR MIT
import goedel
import trace_tm
from machines import SIMPLE
from utm_tm import TM, Direction


def test_tape_bounds():
    assert trace_tm.tape_bounds(goedel.parse(SIMPLE, 2), 100) == (0, 5)
    assert trace_tm.tape_bounds(goedel.parse(SIMPLE, 2), 2) == (0, 3)


def test_text_rows():
    rows = list(trace_tm.text_rows(goedel.parse(SIMPLE, 2), 100))
    assert len(rows) == 7
    assert rows[0] == '[q1:1] 0 0 1 ⌴ ⌴'
    assert rows[2] == '1 0 [q3:0] 1 ⌴ ⌴'
    assert rows[-1] == rows[-2] == '1 0 0 1 ⌴ [q2:⌴]'


def test_main_writes_text(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    trace_tm.main(goedel.parse(SIMPLE, 2), 3, 'simple')
    assert (tmp_path / 'utm_simple.txt').read_text(encoding='utf-8').splitlines()[-1] == '1 0 0 [q4:1]'


def test_save_png(tmp_path):
    from PIL import Image
    path = tmp_path / 'simple.png'
    trace_tm.save_png(goedel.parse(SIMPLE, 2), 100, path)
    with Image.open(path) as img:
        assert img.size == (6, 7)
        assert img.getpixel((0, 0)) == trace_tm.STATE_COLOR[0]
        assert img.getpixel((1, 0)) == (128, 128, 128)
        assert img.getpixel((5, 0)) == (0, 0, 0)
        assert img.getpixel((5, 6)) == trace_tm.STATE_COLOR[1]


def test_png_shades_span_the_alphabet(tmp_path):
    from PIL import Image
    tm = goedel.parse(SIMPLE, 2)
    trace_tm.save_png(tm, 100, tmp_path / 'simple.png')
    with Image.open(tmp_path / 'simple.png') as img:
        assert img.getpixel((1, 0)) == (0, 0, 0)
        assert img.getpixel((3, 0)) == (128, 128, 128)
    wide = TM([(1, 3, 2, 6, Direction.R)], alphabet=('0', '1', TM.BLANK_LABEL, 'b', 'c', 'd'))
    trace_tm.save_png(wide, 10, tmp_path / 'wide.png')
    with Image.open(tmp_path / 'wide.png') as img:
        assert img.size == (2, 3)
        assert img.getpixel((0, 1)) == (255, 255, 255)
        assert img.getpixel((1, 1)) == trace_tm.STATE_COLOR[1]
