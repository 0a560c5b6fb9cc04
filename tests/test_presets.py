"""Tests for timer presets and the preset manager."""

import pytest

from focusly.errors import PresetError
from focusly.timer.presets import (
    BUILT_IN_PRESETS,
    CLASSIC_POMODORO,
    DEFAULT_PRESET,
    PresetManager,
    TimerPreset,
    preset_from_settings,
)


def _custom(name="Writing", preset_id="writing"):
    return TimerPreset(
        id=preset_id,
        name=name,
        work_duration=40 * 60,
        break_duration=8 * 60,
        max_cycles=3,
        long_break_duration=20 * 60,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  BUILT-INS
# ═══════════════════════════════════════════════════════════════════════════


class TestBuiltIns:

    def test_eight_built_ins(self):
        assert len(BUILT_IN_PRESETS) == 8
        assert all(p.is_built_in for p in BUILT_IN_PRESETS)
        assert len({p.id for p in BUILT_IN_PRESETS}) == 8

    def test_every_built_in_has_long_break(self):
        assert all(p.long_break_duration for p in BUILT_IN_PRESETS)

    def test_classic_pomodoro_values(self):
        assert CLASSIC_POMODORO.work_duration == 25 * 60
        assert CLASSIC_POMODORO.break_duration == 5 * 60
        assert CLASSIC_POMODORO.long_break_duration == 15 * 60
        assert CLASSIC_POMODORO.max_cycles == 4

    def test_description(self):
        assert CLASSIC_POMODORO.description == "25m work / 5m break × 4"


# ═══════════════════════════════════════════════════════════════════════════
#  MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class TestPresetManager:

    def test_default_current_preset(self):
        assert PresetManager().current_preset == DEFAULT_PRESET

    def test_current_preset_from_settings(self, store):
        store.update(current_preset_id="classic_pomodoro")
        assert PresetManager(store).current_preset == CLASSIC_POMODORO

    def test_unknown_saved_id_falls_back(self, store):
        store.update(current_preset_id="gone")
        assert PresetManager(store).current_preset == DEFAULT_PRESET

    def test_add_custom_goes_before_built_ins(self):
        mgr = PresetManager()
        added = mgr.add_preset(_custom())
        assert mgr.presets[0] == added
        assert mgr.custom_presets == [added]
        assert len(mgr.built_in_presets) == 8

    def test_add_duplicate_id_gets_new_id(self):
        mgr = PresetManager()
        first = mgr.add_preset(_custom())
        second = mgr.add_preset(_custom(name="Writing 2"))
        assert first.id != second.id
        assert len(mgr.custom_presets) == 2

    def test_add_built_in_copy_becomes_custom(self):
        mgr = PresetManager()
        added = mgr.add_preset(CLASSIC_POMODORO)
        assert not added.is_built_in
        assert added.id != CLASSIC_POMODORO.id

    def test_custom_presets_persist(self):
        PresetManager().add_preset(_custom())
        reloaded = PresetManager()
        assert [p.name for p in reloaded.custom_presets] == ["Writing"]
        assert reloaded.custom_presets[0].long_break_duration == 20 * 60

    def test_update_custom(self):
        mgr = PresetManager()
        added = mgr.add_preset(_custom())
        mgr.update_preset(TimerPreset(
            id=added.id, name="Editing", work_duration=30 * 60,
            break_duration=5 * 60, max_cycles=2,
        ))
        assert mgr.get(added.id).name == "Editing"
        assert PresetManager().get(added.id).work_duration == 30 * 60

    def test_update_built_in_refused(self):
        with pytest.raises(PresetError):
            PresetManager().update_preset(CLASSIC_POMODORO)

    def test_update_unknown_refused(self):
        with pytest.raises(PresetError):
            PresetManager().update_preset(_custom(preset_id="missing"))

    def test_delete_built_in_refused(self):
        mgr = PresetManager()
        with pytest.raises(PresetError):
            mgr.delete_preset(CLASSIC_POMODORO)
        assert CLASSIC_POMODORO in mgr.presets

    def test_delete_current_falls_back_to_default(self, store):
        mgr = PresetManager(store)
        added = mgr.add_preset(_custom())
        mgr.set_current_preset(added)
        mgr.delete_preset(added)
        assert mgr.current_preset == DEFAULT_PRESET
        assert store.settings.current_preset_id == DEFAULT_PRESET.id

    def test_set_current_persists_id(self, store):
        PresetManager(store).set_current_preset(CLASSIC_POMODORO)
        assert store.settings.current_preset_id == "classic_pomodoro"

    def test_apply_preset_copies_durations(self, store):
        PresetManager(store).apply_preset(CLASSIC_POMODORO)
        assert store.settings.work_duration == 25 * 60
        assert store.settings.break_duration == 5 * 60
        assert store.settings.max_cycles == 4

    def test_apply_preset_without_store(self):
        mgr = PresetManager()
        mgr.apply_preset(CLASSIC_POMODORO)
        assert mgr.current_preset == CLASSIC_POMODORO

    def test_preset_from_settings(self, settings):
        preset = preset_from_settings(settings, "Mine")
        assert preset.name == "Mine"
        assert preset.work_duration == settings.work_duration
        assert preset.max_cycles == settings.max_cycles
        assert not preset.is_built_in
