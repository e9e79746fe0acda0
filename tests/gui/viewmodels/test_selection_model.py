"""Tests for the page-scoped SelectionModel."""

from adminconsole.gui.viewmodels.selection import SelectionModel


def _model(ids=(1, 2, 3)):
    model = SelectionModel()
    model.replace_page(ids)
    return model


class TestSelectionModel:
    def test_toggle_adds_and_removes(self):
        model = _model()

        assert model.toggle(2) is True
        assert model.is_selected(2)
        assert model.toggle(2) is False
        assert model.selected_ids == frozenset()

    def test_toggle_ignores_ids_off_page(self):
        model = _model()

        assert model.toggle(42) is False
        assert model.count == 0

    def test_select_all_only_covers_current_page(self):
        model = _model(range(10))

        assert model.select_all() == frozenset(range(10))
        assert model.all_selected

    def test_toggle_all_flips_between_all_and_none(self):
        model = _model()
        model.toggle(1)

        assert model.toggle_all() == frozenset({1, 2, 3})
        assert model.toggle_all() == frozenset()

    def test_replace_page_drops_selection(self):
        model = _model()
        model.select_all()
        changes = []
        model.selected.changed.connect(lambda new, old: changes.append(new))

        model.replace_page((4, 5))

        assert model.selected_ids == frozenset()
        assert model.page_ids == (4, 5)
        assert changes == [frozenset()]
        assert model.toggle(1) is False

    def test_empty_page_is_never_all_selected(self):
        model = _model(())

        assert model.select_all() == frozenset()
        assert model.all_selected is False

    def test_clear(self):
        model = _model()
        model.select_all()

        model.clear()

        assert model.count == 0
