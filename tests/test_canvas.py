from keybubbles.bubble import Circle
from keybubbles.canvas import DOT, Canvas

BLUE = (0, 0, 255)
GREEN = (0, 255, 0)


def make_canvas(width=11, height=11):
    return Canvas(width, height, x_bounds=(0.0, 10.0), y_bounds=(0.0, 10.0))


def test_y_axis_grows_upwards():
    canvas = make_canvas()
    assert canvas.cell_for(0.0, 0.0) == (0, 10)
    assert canvas.cell_for(10.0, 10.0) == (10, 0)
    assert canvas.cell_for(5.0, 5.0) == (5, 5)


def test_points_outside_bounds_are_dropped():
    canvas = make_canvas()
    assert canvas.cell_for(-0.1, 5.0) is None
    assert canvas.cell_for(5.0, 10.5) is None
    canvas.point(11.0, 11.0, BLUE)
    assert canvas.painted_cells() == 0


def test_empty_canvas_paints_nothing():
    canvas = Canvas(0, 0, x_bounds=(0.0, 10.0), y_bounds=(0.0, 10.0))
    canvas.circle(Circle(5.0, 5.0, 2.0, BLUE))
    assert canvas.painted_cells() == 0
    assert canvas.render().plain == ""


def test_circle_touches_its_extremes():
    canvas = make_canvas()
    canvas.circle(Circle(5.0, 5.0, 3.0, BLUE))
    assert canvas.color_at(8, 5) == BLUE
    assert canvas.color_at(2, 5) == BLUE
    assert canvas.color_at(5, 2) == BLUE
    assert any(canvas.color_at(column, 8) == BLUE for column in range(4, 7))
    assert canvas.color_at(5, 5) is None


def test_later_circles_overwrite_shared_cells():
    canvas = make_canvas()
    canvas.paint([Circle(5.0, 5.0, 3.0, BLUE), Circle(5.0, 5.0, 3.0, GREEN)])
    assert canvas.color_at(8, 5) == GREEN


def test_render_shape_and_styles():
    canvas = make_canvas(width=6, height=3)
    canvas.point(0.0, 10.0, BLUE)
    canvas.point(10.0, 0.0, GREEN)
    text = canvas.render()

    lines = text.plain.split("\n")
    assert lines == [DOT + " " * 5, " " * 6, " " * 5 + DOT]
    colors = {tuple(span.style.color.triplet) for span in text.spans}
    assert colors == {BLUE, GREEN}
