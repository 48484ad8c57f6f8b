import pytest

from draftink.core.annotations import (
    PLACEHOLDER_TEXT,
    AnnotationCollection,
    AnnotationInteraction,
    AnnotationType,
    EditMode,
    HistoryStack,
    InkAnnotation,
    StyleContext,
    TextAnnotation,
)
from draftink.core.coords import Viewport

VIEWPORT = Viewport(scale=2.0, page_height_pt=792, page_width_pt=612)


@pytest.fixture
def history():
    return HistoryStack()


def make_interaction(history, mode=EditMode.BROWSE, style=None):
    return AnnotationInteraction(0, VIEWPORT, history, style=style, mode=mode)


def with_text_box(history, **kwargs):
    # Box at (100, 700) pt spans pixels (200, 184) to (500, 224)
    ann = TextAnnotation(page_index=0, x_pt=100, y_pt=700, **kwargs)
    history.reset(AnnotationCollection([ann]))
    return ann


# Ink drawing

def test_single_point_stroke_is_discarded(history):
    interaction = make_interaction(history, EditMode.INK_DRAW)
    interaction.pointer_down(10, 10)
    assert interaction.pointer_up(10, 10) is None
    assert len(history.current) == 0
    assert not history.can_undo()
    assert not interaction.is_drawing


def test_stroke_becomes_one_ink_annotation(history):
    style = StyleContext(color="#ff0000", thickness_pt=4)
    interaction = make_interaction(history, EditMode.INK_DRAW, style)

    interaction.pointer_down(0, 0)
    interaction.pointer_move(20, 40)
    interaction.pointer_move(40, 40)
    assert interaction.pending_stroke == ((0, 0), (20, 40), (40, 40))
    ann = interaction.pointer_up(40, 40)

    assert isinstance(ann, InkAnnotation)
    assert len(history.current) == 1
    assert history.current[0] == ann
    assert len(ann.strokes) == 1
    assert ann.strokes[0] == ((0, 792), (10, 772), (20, 772))
    assert ann.color == "#ff0000"
    assert ann.thickness_pt == 4
    assert ann.page_index == 0


def test_each_stroke_is_its_own_undo_step(history):
    interaction = make_interaction(history, EditMode.INK_DRAW)
    for start in (0, 100):
        interaction.pointer_down(start, start)
        interaction.pointer_move(start + 5, start + 5)
        interaction.pointer_up(start + 5, start + 5)

    assert len(history.current) == 2
    history.undo()
    assert len(history.current) == 1


def test_leaving_the_layer_finishes_the_stroke(history):
    interaction = make_interaction(history, EditMode.INK_DRAW)
    interaction.pointer_down(0, 0)
    interaction.pointer_move(10, 10)
    assert isinstance(interaction.pointer_leave(), InkAnnotation)
    assert not interaction.is_drawing


def test_mode_switch_drops_unfinished_stroke(history):
    interaction = make_interaction(history, EditMode.INK_DRAW)
    interaction.pointer_down(0, 0)
    interaction.pointer_move(10, 10)
    interaction.set_mode(EditMode.BROWSE)

    assert not interaction.is_drawing
    assert interaction.pointer_up(10, 10) is None
    assert len(history.current) == 0


def test_no_drawing_outside_ink_mode(history):
    interaction = make_interaction(history, EditMode.TEXT_INSERT)
    interaction.pointer_down(0, 0)
    interaction.pointer_move(10, 10)
    assert not interaction.is_drawing


# Text insertion

def test_click_inserts_placeholder_text(history):
    style = StyleContext(font_size_pt=18, color="#0000ff")
    interaction = make_interaction(history, EditMode.TEXT_INSERT, style)

    ann = interaction.click(200, 184)

    assert isinstance(ann, TextAnnotation)
    assert ann.text == PLACEHOLDER_TEXT
    assert (ann.x_pt, ann.y_pt) == pytest.approx((100, 700))
    assert ann.font_size_pt == 18
    assert ann.color == "#0000ff"
    assert list(history.current) == [ann]


def test_style_is_captured_at_creation(history):
    style = StyleContext(color="#111111")
    interaction = make_interaction(history, EditMode.TEXT_INSERT, style)
    ann = interaction.click(10, 10)

    style.color = "#222222"
    style.font_size_pt = 30
    assert history.current.get(ann.id).color == "#111111"
    assert history.current.get(ann.id).font_size_pt == 12


def test_click_on_existing_box_does_not_insert(history):
    with_text_box(history)
    interaction = make_interaction(history, EditMode.TEXT_INSERT)
    assert interaction.click(250, 200) is None
    assert len(history.current) == 1


def test_click_in_browse_mode_does_nothing(history):
    interaction = make_interaction(history)
    assert interaction.click(10, 10) is None
    assert len(history.current) == 0


# Dragging

def test_drag_keeps_grab_offset(history):
    ann = with_text_box(history)
    interaction = make_interaction(history)

    interaction.pointer_down(210, 190)
    assert interaction.is_dragging
    interaction.pointer_move(310, 290)

    moved = history.current.get(ann.id)
    assert (moved.x_pt, moved.y_pt) == pytest.approx((150, 650))
    left, top, _, _ = interaction.text_box(moved)
    assert (210 + 100 - left, 190 + 100 - top) == pytest.approx((10, 6))

    interaction.pointer_up(310, 290)
    assert not interaction.is_dragging


def test_every_drag_move_is_recorded(history):
    ann = with_text_box(history)
    interaction = make_interaction(history)

    interaction.pointer_down(210, 190)
    interaction.pointer_move(220, 190)
    interaction.pointer_move(230, 190)
    interaction.pointer_up(230, 190)

    assert history.index == 2
    history.undo()
    assert history.current.get(ann.id).x_pt == pytest.approx(105)


def test_drag_does_not_start_in_insert_mode(history):
    ann = with_text_box(history)
    interaction = make_interaction(history, EditMode.TEXT_INSERT)
    interaction.pointer_down(210, 190)
    interaction.pointer_move(300, 300)
    assert not interaction.is_dragging
    assert history.current.get(ann.id).x_pt == 100


def test_press_outside_boxes_does_not_drag(history):
    with_text_box(history)
    interaction = make_interaction(history)
    interaction.pointer_down(10, 10)
    assert not interaction.is_dragging


def test_topmost_box_wins(history):
    lower = TextAnnotation(page_index=0, x_pt=100, y_pt=700)
    upper = TextAnnotation(page_index=0, x_pt=100, y_pt=700)
    history.reset(AnnotationCollection([lower, upper]))
    interaction = make_interaction(history)
    assert interaction.annotation_at(250, 200) == upper


def test_boxes_on_other_pages_are_ignored(history):
    history.reset(AnnotationCollection([TextAnnotation(page_index=1, x_pt=100, y_pt=700)]))
    interaction = make_interaction(history)
    assert interaction.annotation_at(250, 200) is None


# Text editing

def test_double_click_edits_and_enter_commits(history):
    ann = with_text_box(history, text="Old")
    interaction = make_interaction(history)

    assert interaction.double_click(250, 200) == ann.id
    assert interaction.editing_id == ann.id
    assert interaction.state.buffer == "Old"

    interaction.edit_text("New text")
    assert history.current.get(ann.id).text == "Old"

    interaction.key_enter()
    assert interaction.editing_id is None
    assert history.current.get(ann.id).text == "New text"


def test_double_click_outside_boxes_does_nothing(history):
    with_text_box(history)
    interaction = make_interaction(history)
    assert interaction.double_click(10, 10) is None
    assert interaction.editing_id is None


def test_click_while_editing_commits_without_inserting(history):
    ann = with_text_box(history)
    interaction = make_interaction(history, EditMode.TEXT_INSERT)
    interaction.begin_edit(ann.id)
    interaction.edit_text("Typed")

    interaction.pointer_down(10, 10)
    interaction.pointer_up(10, 10)
    assert interaction.click(10, 10) is None

    assert len(history.current) == 1
    assert history.current.get(ann.id).text == "Typed"

    # The next click inserts again
    assert interaction.click(10, 10) is not None


def test_blur_commits(history):
    ann = with_text_box(history)
    interaction = make_interaction(history)
    interaction.begin_edit(ann.id)
    interaction.edit_text("Blurred")
    interaction.commit_edit()
    assert history.current.get(ann.id).text == "Blurred"


def test_edit_of_deleted_annotation_is_dropped(history):
    ann = with_text_box(history)
    interaction = make_interaction(history)
    interaction.begin_edit(ann.id)
    history.push(history.current.remove(ann.id))

    interaction.edit_text("Ghost")
    interaction.commit_edit()
    assert len(history.current) == 0


def test_ink_cannot_be_edited_as_text(history):
    ink = InkAnnotation(page_index=0, strokes=[[(0, 0), (1, 1)]])
    history.reset(AnnotationCollection([ink]))
    interaction = make_interaction(history)
    assert interaction.begin_edit(ink.id) is None


def test_only_text_annotations_are_hit(history):
    ink = InkAnnotation(page_index=0, strokes=[[(100, 700), (200, 600)]])
    history.reset(AnnotationCollection([ink]))
    interaction = make_interaction(history)
    assert interaction.annotation_at(250, 200) is None
    assert all(a.annotation_type == AnnotationType.INK for a in history.current)


def test_closing_an_unchanged_edit_records_nothing(history):
    ann = with_text_box(history, text="Same")
    interaction = make_interaction(history)

    interaction.begin_edit(ann.id)
    interaction.key_enter()
    interaction.begin_edit(ann.id)
    interaction.edit_text("Same")
    interaction.commit_edit()

    assert history.index == 0
    assert not history.can_undo()
    assert history.current.get(ann.id).text == "Same"
