"""Tests for system prompt resolution."""

from __future__ import annotations

from figma_chat.prompts import get_system_prompt, load_default_prompt


class TestGetSystemPrompt:
    """Tests for get_system_prompt."""

    def test_override_wins(self, tmp_path):
        prompt_file = tmp_path / "prompt-system.md"
        prompt_file.write_text("from file", encoding="utf-8")
        assert get_system_prompt(override="  from env  ", path=prompt_file) == "from env"

    def test_file(self, tmp_path):
        prompt_file = tmp_path / "prompt-system.md"
        prompt_file.write_text("You are a design reviewer.\n", encoding="utf-8")
        assert get_system_prompt(path=prompt_file) == "You are a design reviewer."

    def test_missing_file_falls_back(self, tmp_path):
        assert get_system_prompt(path=tmp_path / "missing.md") == load_default_prompt()

    def test_empty_file_falls_back(self, tmp_path):
        prompt_file = tmp_path / "prompt-system.md"
        prompt_file.write_text("   ", encoding="utf-8")
        assert get_system_prompt(path=prompt_file) == load_default_prompt()

    def test_default_prompt_packaged(self):
        assert "Figma" in load_default_prompt()
