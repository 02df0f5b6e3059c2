"""
Integration tests for the editing session: load, structural edits,
synchronization into source and broadcasts, all on one event loop.
"""

import asyncio

import pytest

from propsync.logging_config import is_sync_record, logger
from propsync.sync import EditingSession, RenderSurface

pytestmark = pytest.mark.integration

CARD = "home-page > div.card"
BUTTON = "home-page > div.card > button"


@pytest.fixture
def session(component_source, registry, definitions, sync_config, ts_parser):
    return EditingSession(
        component_source,
        registry=registry,
        definitions=definitions,
        config=sync_config,
        parser=ts_parser,
    )


class TestLoad:
    """Full-content load of both views."""

    @pytest.mark.asyncio
    async def test_load_synchronizes_source(self, session, component_markup):
        payload = await session.load(component_markup)

        assert payload.error is None
        assert payload.source == session.source_text
        assert "import { Button, Div } from '@html-props/built-ins';" in session.source_text
        assert "      new Div({ className: 'card', content: [\n" in session.source_text
        assert "        new Button({ textContent: 'Click' })\n" in session.source_text
        assert "textContent: 'old'" not in session.source_text

    @pytest.mark.asyncio
    async def test_component_never_constructs_itself(self, session, component_markup):
        await session.load(component_markup)

        assert "new HomePage" not in session.source_text

    @pytest.mark.asyncio
    async def test_payload_snapshot_excludes_decoration(self, session, component_markup):
        payload = await session.load(component_markup)

        assert "wb-hoverable" not in payload.decorated_tree_markup
        assert "wb-hoverable" in session.view.overlay.document.outer_html()
        assert payload.snapshot[0].tag == "home-page"

    @pytest.mark.asyncio
    async def test_load_timeout_keeps_views_on_shown_content(
        self, session, component_source, component_markup, monkeypatch
    ):
        async def never_loads(timeout=None):
            raise asyncio.TimeoutError

        monkeypatch.setattr(session.surface, "wait_loaded", never_loads)

        payload = await session.load(component_markup)

        assert payload.error == "Render surface did not finish loading"
        assert session.source_text == component_source
        assert session.view.clean.document is session.surface.document
        assert session.view.clean.resolve(BUTTON) is not None
        assert session.view.overlay.resolve(BUTTON) is not None


class TestStructuralEdits:
    """Edits flow into both views and then into source."""

    @pytest.mark.asyncio
    async def test_update_text(self, session, component_markup):
        await session.load(component_markup)

        applied = await session.apply_structural_edit(BUTTON, "update", {"name": "text", "value": "Go"})

        assert applied is True
        assert "new Button({ textContent: 'Go' })" in session.source_text
        assert session.selection == BUTTON

    @pytest.mark.asyncio
    async def test_insert_custom_element(self, session, component_markup):
        await session.load(component_markup)

        applied = await session.apply_structural_edit(CARD, "insert_inside", {"markup": "<x-counter></x-counter>"})

        assert applied is True
        assert "new Counter({ count: '0', label: 'Clicks' })" in session.source_text
        assert "import { Counter } from '/project/src/components/counter.ts';" in session.source_text
        assert session.last_payload.runtime_properties == {
            f"{CARD} > x-counter": {"count": "0", "label": "Clicks"},
        }

    @pytest.mark.asyncio
    async def test_delete(self, session, component_markup):
        await session.load(component_markup)

        assert await session.apply_structural_edit(BUTTON, "delete") is True
        assert "Button" not in session.source_text
        assert "new Div({ className: 'card' })" in session.source_text

    @pytest.mark.asyncio
    async def test_move_keeps_runtime_state(self, session):
        await session.load(
            '<home-page><section id="a"><x-counter></x-counter></section><section id="b"></section></home-page>'
        )
        counter = session.view.clean.resolve("#a > x-counter")
        counter.instance.count = 4

        applied = await session.apply_structural_edit(
            "#a > x-counter", "move", {"target": "#b", "position": "inside"}
        )

        assert applied is True
        assert session.selection == "#b > x-counter"
        assert session.view.clean.resolve("#b > x-counter") is counter
        assert "new Counter({ count: '4', label: 'Clicks' })" in session.source_text

    @pytest.mark.asyncio
    async def test_failed_edit_broadcasts_error(self, session, component_markup):
        await session.load(component_markup)
        before = session.source_text

        applied = await session.apply_structural_edit("home-page > #missing", "delete")

        assert applied is False
        assert session.source_text == before
        assert session.last_payload.error

    @pytest.mark.asyncio
    async def test_invalid_operation(self, session, component_markup):
        await session.load(component_markup)

        assert await session.apply_structural_edit(BUTTON, "explode") is False

    @pytest.mark.asyncio
    async def test_source_without_render_body_is_never_rewritten(
        self, registry, definitions, sync_config, ts_parser, component_markup
    ):
        source = "export const notAComponent = 1;\n"
        session = EditingSession(source, registry, definitions, config=sync_config, parser=ts_parser)

        payload = await session.load(component_markup)

        assert session.source_text == source
        assert payload.error


class TestScheduling:
    """One operation at a time, in arrival order."""

    @pytest.mark.asyncio
    async def test_edit_waits_for_pending_load(self, session, component_markup):
        """An edit issued during a load applies to the loaded trees."""
        payload, applied = await asyncio.gather(
            session.load(component_markup),
            session.apply_structural_edit(BUTTON, "update", {"name": "text", "value": "Later"}),
        )

        assert payload.error is None
        assert applied is True
        assert "textContent: 'Later'" in session.source_text

    @pytest.mark.asyncio
    async def test_edits_apply_in_order(self, session, component_markup):
        await session.load(component_markup)

        await asyncio.gather(
            session.apply_structural_edit(BUTTON, "update", {"name": "text", "value": "first"}),
            session.apply_structural_edit(BUTTON, "update", {"name": "text", "value": "second"}),
        )

        assert "textContent: 'second'" in session.source_text

    @pytest.mark.asyncio
    async def test_behaviors_attach_after_debounce(self, session, component_markup):
        await session.load(component_markup)

        await session.apply_structural_edit(CARD, "insert_inside", {"markup": "<em>new</em>"})
        inserted = session.view.overlay.resolve(f"{CARD} > em")

        assert session.scheduler.behaviors_pending is True
        assert "wb-hoverable" not in inserted.classes

        await asyncio.sleep(0.1)

        assert session.scheduler.behaviors_pending is False
        assert "wb-hoverable" in inserted.classes


class TestObservers:
    """Broadcast fan-out, selection and hover."""

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_block_others(self, session, component_markup):
        received = []

        def broken(payload):
            raise RuntimeError("panel crashed")

        session.subscribe(broken)
        session.subscribe(received.append)

        await session.load(component_markup)

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self, session, component_markup):
        received = []
        unsubscribe = session.subscribe(received.append)
        unsubscribe()

        await session.load(component_markup)

        assert received == []

    @pytest.mark.asyncio
    async def test_selection_marker_stays_out_of_clean_view(self, session, component_markup):
        await session.load(component_markup)

        payload = await session.select(CARD)

        assert '<div class="card" data-layers-selected>' in payload.decorated_tree_markup
        assert "data-layers-selected" not in session.view.clean.document.outer_html()

    @pytest.mark.asyncio
    async def test_hover_marker(self, session, component_markup):
        await session.load(component_markup)

        payload = await session.hover(BUTTON)

        assert "<button data-layers-hovered>Click</button>" in payload.decorated_tree_markup

    @pytest.mark.asyncio
    async def test_unresolvable_selection_is_harmless(self, session, component_markup):
        await session.load(component_markup)

        payload = await session.select("nav > !!")

        assert "data-layers-selected" not in payload.decorated_tree_markup


class TestRegenerateSource:
    """Direct regeneration from the current Clean tree."""

    @pytest.mark.asyncio
    async def test_regenerate_matches_session_source(self, session, component_source, component_markup):
        await session.load(component_markup)

        assert session.regenerate_source(component_source) == session.source_text

    @pytest.mark.asyncio
    async def test_regenerate_without_boundary_returns_input(self, session, component_markup):
        await session.load(component_markup)

        assert session.regenerate_source("const x = 1;\n") == "const x = 1;\n"


class TestRenderSurface:
    """Load signalling of the Clean render."""

    @pytest.mark.asyncio
    async def test_custom_elements_upgrade_after_load(self, definitions):
        surface = RenderSurface(definitions)

        document = surface.replace_content("<x-counter></x-counter>")
        counter = document.body.element_children[0]
        assert counter.instance is None
        assert surface.is_loaded is False

        await surface.wait_loaded(1.0)

        assert counter.instance is not None
        assert surface.is_loaded is True

    @pytest.mark.asyncio
    async def test_superseded_load_never_signals(self):
        surface = RenderSurface()
        loads = []
        surface.add_load_listener(loads.append)

        surface.replace_content("<p>first</p>")
        surface.replace_content("<p>second</p>")
        document = await surface.wait_loaded(1.0)

        assert document.outer_html() == "<p>second</p>"
        assert loads == [document]

    @pytest.mark.asyncio
    async def test_wait_without_load_times_out(self):
        surface = RenderSurface()

        with pytest.raises(asyncio.TimeoutError):
            await surface.wait_loaded(0.01)


class TestSyncJournal:
    """Every sync pass tags its log records with the pass number."""

    @pytest.mark.asyncio
    async def test_records_carry_pass_number(self, session, component_markup):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="TRACE", filter=is_sync_record)
        try:
            await session.load(component_markup)
            await session.apply_structural_edit(BUTTON, "update", {"name": "text", "value": "Go"})
        finally:
            logger.remove(sink_id)

        assert session.scheduler.sync_passes == 2
        assert {record["extra"]["sync_pass"] for record in records} == {1, 2}
        assert any("Sync pass 2 finished: success=True" in record["message"] for record in records)
