import random
from datetime import datetime, timezone

import pytest

from formbuilder.builder.form import FormAggregate
from formbuilder.builder.templates import TEMPLATES
from formbuilder.core.errors import NotFound, ValidationError
from formbuilder.schemas import FormDocument


@pytest.fixture
def form():
    return FormAggregate()


def orders_by_id(form, step_id):
    return {f.id: f.order for f in form.fields_in_step(step_id)}


def test_new_form_has_one_step(form):
    assert form.document.title == "Untitled Form"
    assert form.step_ids() == [1]
    assert form.fields == []


def test_add_field_appends_and_seeds_options(form):
    first = form.add_field("text", 1)
    second = form.add_field("select", 1)

    assert first.order == 1
    assert second.order == 2
    assert [(o.label, o.value) for o in second.options] == [
        ("Option 1", "option1"),
        ("Option 2", "option2"),
    ]


def test_add_field_to_unknown_step_fails(form):
    with pytest.raises(NotFound):
        form.add_field("text", 7)
    assert form.fields == []


def test_add_field_with_unknown_type_fails(form):
    with pytest.raises(ValidationError):
        form.add_field("signature", 1)


def test_update_field_merges_patch(form):
    field = form.add_field("text", 1)

    updated = form.update_field(field.id, {"label": "Email", "helpText": "We never share it", "required": True})

    assert updated.label == "Email"
    assert updated.help_text == "We never share it"
    assert updated.required is True
    assert form.get_field(field.id) == updated


def test_update_field_keeps_options_when_type_changes(form):
    field = form.add_field("select", 1)

    updated = form.update_field(field.id, {"type": "text"})

    assert updated.type == "text"
    assert [o.value for o in updated.options] == ["option1", "option2"]


def test_update_field_seeds_options_for_choice_type(form):
    field = form.add_field("text", 1)

    updated = form.update_field(field.id, {"type": "radio"})

    assert [o.value for o in updated.options] == ["option1", "option2"]


def test_update_field_errors(form):
    field = form.add_field("text", 1)

    with pytest.raises(NotFound):
        form.update_field("missing", {"label": "x"})
    with pytest.raises(ValidationError):
        form.update_field(field.id, {"id": "other"})
    with pytest.raises(ValidationError):
        form.update_field(field.id, {"colour": "red"})
    with pytest.raises(NotFound):
        form.update_field(field.id, {"stepId": 9})


def test_remove_field_is_idempotent(form):
    field = form.add_field("text", 1)

    form.remove_field(field.id)
    form.remove_field(field.id)

    assert form.fields == []


def test_duplicate_field_keeps_orders_distinct(form):
    a = form.add_field("text", 1)
    form.add_field("email", 1)
    form.add_field("textarea", 1)

    copy = form.duplicate_field(a.id)

    orders = [f.order for f in form.fields_in_step(1)]
    assert orders == [1, 2, 3, 4]
    assert copy.id != a.id
    assert copy.label == f"{a.label} (Copy)"
    assert form.fields_in_step(1)[1].id == copy.id


def test_reorder_fields_swaps_order_values(form):
    a = form.add_field("text", 1)
    b = form.add_field("text", 1)
    c = form.add_field("text", 1)

    form.reorder_fields(1, 0, 2)

    assert orders_by_id(form, 1) == {a.id: 3, b.id: 2, c.id: 1}


def test_reorder_fields_twice_restores_original(form):
    for _ in range(4):
        form.add_field("text", 1)
    before = orders_by_id(form, 1)

    form.reorder_fields(1, 1, 3)
    assert orders_by_id(form, 1) != before
    form.reorder_fields(1, 1, 3)

    assert orders_by_id(form, 1) == before


def test_reorder_fields_ignores_invalid_positions(form):
    form.add_field("text", 1)
    before = orders_by_id(form, 1)

    form.reorder_fields(1, 0, 5)
    form.reorder_fields(1, 0, 0)

    assert orders_by_id(form, 1) == before


def test_add_step(form):
    step = form.add_step()

    assert step.id == 2
    assert step.order == 2
    assert step.title == "Step 2"
    assert form.step_ids() == [1, 2]


def test_move_field_appends_to_target_step(form):
    form.add_step()
    form.add_field("text", 2)
    field = form.add_field("text", 1)

    moved = form.move_field(field.id, 2)

    assert moved.step_id == 2
    assert moved.order == 2


def test_step_references_stay_valid_under_random_edits(form):
    rng = random.Random(1234)
    for _ in range(200):
        op = rng.choice(["add_field", "add_step", "remove_field"])
        if op == "add_field":
            form.add_field(rng.choice(["text", "select", "date"]), rng.choice(form.step_ids()))
        elif op == "add_step":
            form.add_step()
        elif form.fields:
            form.remove_field(rng.choice(form.fields).id)

        assert {f.step_id for f in form.fields} <= set(form.step_ids())


def test_load_template_keeps_identity():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    form = FormAggregate(
        FormDocument(id=5, public_id="abc123", title="Old", created_at=created, updated_at=created)
    )
    form.add_field("text", 1)

    form.load_template("contact")

    contact = TEMPLATES["contact"]
    doc = form.document
    assert doc.id == 5
    assert doc.public_id == "abc123"
    assert doc.created_at == created
    assert doc.updated_at == created
    assert doc.title == contact.title
    assert doc.fields == contact.fields
    assert doc.steps == contact.steps


def test_load_unknown_template_fails(form):
    with pytest.raises(NotFound):
        form.load_template("wedding")


def test_option_edits(form):
    field = form.add_field("radio", 1)

    added = form.add_option(field.id)
    renamed = form.update_option(field.id, 0, "Very  Good")
    form.remove_option(field.id, 1)

    assert (added.label, added.value) == ("Option 3", "option3")
    assert renamed.value == "very_good"
    assert [o.value for o in form.get_field(field.id).options] == ["very_good", "option3"]


def test_update_option_allows_duplicate_values_by_default(form):
    field = form.add_field("select", 1)

    form.update_option(field.id, 0, "Same")
    form.update_option(field.id, 1, "same")
    assert [o.value for o in form.get_field(field.id).options] == ["same", "same"]

    form.update_option(field.id, 1, "same", ensure_unique=True)
    assert [o.value for o in form.get_field(field.id).options] == ["same", "same_2"]


def test_option_index_out_of_range(form):
    field = form.add_field("select", 1)

    with pytest.raises(ValidationError):
        form.remove_option(field.id, 2)
    with pytest.raises(ValidationError):
        form.update_option(field.id, -1, "x")


def test_snapshots_are_independent(form):
    snapshot = form.snapshot()

    form.add_field("text", 1)
    form.set_title("Changed")

    assert snapshot.fields == []
    assert snapshot.title == "Untitled Form"


def test_set_settings_accepts_camel_case(form):
    form.set_settings({"requireAuth": True, "submit_message": "Thanks"})

    assert form.document.settings.require_auth is True
    assert form.document.settings.submit_message == "Thanks"
    with pytest.raises(ValidationError):
        form.set_settings({"darkMode": True})
