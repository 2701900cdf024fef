## Cohen-Sutherland line clipping for meshport viewports
## Copyright (c) 2026 meshport contributors

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
2D line clipping against an axis-aligned rectangle.

``rect`` is ``(xmin, ymin, xmax, ymax)`` in screen orientation: TOP is
the ``y < ymin`` side and BOTTOM the ``y > ymax`` side.
"""

INSIDE = 0
LEFT = 1
RIGHT = 2
TOP = 4
BOTTOM = 8


def outcode(x, y, rect):
    """region code of point (x, y) relative to rect"""
    xmin, ymin, xmax, ymax = rect
    code = INSIDE
    if x < xmin:
        code |= LEFT
    elif x > xmax:
        code |= RIGHT
    if y < ymin:
        code |= TOP
    elif y > ymax:
        code |= BOTTOM
    return code


def clip_line(p0, p1, rect):
    """Clip segment p0-p1 to rect.

    Returns ``((x0, y0), (x1, y1))`` for the visible part, or None if the
    segment lies entirely outside.
    """
    xmin, ymin, xmax, ymax = rect
    x0, y0 = float(p0[0]), float(p0[1])
    x1, y1 = float(p1[0]), float(p1[1])
    code0 = outcode(x0, y0, rect)
    code1 = outcode(x1, y1, rect)

    while True:
        if not (code0 | code1):
            return (x0, y0), (x1, y1)
        if code0 & code1:
            return None

        out = code0 if code0 else code1
        # a nonzero outcode on this axis means the segment crosses it, so
        # the divisors below are never zero
        if out & TOP:
            x = x0 + (x1 - x0) * (ymin - y0) / (y1 - y0)
            y = ymin
        elif out & BOTTOM:
            x = x0 + (x1 - x0) * (ymax - y0) / (y1 - y0)
            y = ymax
        elif out & RIGHT:
            y = y0 + (y1 - y0) * (xmax - x0) / (x1 - x0)
            x = xmax
        else:
            y = y0 + (y1 - y0) * (xmin - x0) / (x1 - x0)
            x = xmin

        if out == code0:
            x0, y0 = x, y
            code0 = outcode(x0, y0, rect)
        else:
            x1, y1 = x, y
            code1 = outcode(x1, y1, rect)


__all__ = ['INSIDE', 'LEFT', 'RIGHT', 'TOP', 'BOTTOM', 'outcode', 'clip_line']
