"""Tests for fstab entry handling."""

from unison_stack.lib.fstab import FstabEntry, ensure_entry, has_entry, swap_entry


class TestFstabEntry:
    """Tests for FstabEntry rendering."""

    def test_swap_line(self):
        """Test the swap entry renders the canonical line."""
        assert swap_entry("/swapfile").render() == "/swapfile none swap sw 0 0"

    def test_generic_line(self):
        """Test a regular mount renders all six fields."""
        e = FstabEntry(spec="UUID=abc", mountpoint="/", fstype="ext4", passno=1)
        assert e.render() == "UUID=abc / ext4 defaults 0 1"


class TestEnsureEntry:
    """Tests for idempotent appends."""

    def test_appends_once(self, tmp_path):
        """Test repeated calls never duplicate the line."""
        fstab = tmp_path / "fstab"
        fstab.write_text("proc /proc proc defaults 0 0\n", encoding="utf-8")
        entry = swap_entry("/swapfile")

        assert ensure_entry(str(fstab), entry) is True
        assert ensure_entry(str(fstab), entry) is False

        lines = fstab.read_text(encoding="utf-8").splitlines()
        assert lines.count("/swapfile none swap sw 0 0") == 1
        assert lines[0] == "proc /proc proc defaults 0 0"

    def test_missing_trailing_newline(self, tmp_path):
        """Test the new line does not get glued onto the last existing one."""
        fstab = tmp_path / "fstab"
        fstab.write_text("proc /proc proc defaults 0 0", encoding="utf-8")
        ensure_entry(str(fstab), swap_entry("/swapfile"))
        assert fstab.read_text(encoding="utf-8").splitlines() == [
            "proc /proc proc defaults 0 0",
            "/swapfile none swap sw 0 0",
        ]

    def test_match_is_exact(self, tmp_path):
        """Test a commented or differently-spaced line does not count."""
        fstab = tmp_path / "fstab"
        fstab.write_text("#/swapfile none swap sw 0 0\n/swapfile  none swap sw 0 0\n", encoding="utf-8")
        assert not has_entry(str(fstab), swap_entry("/swapfile"))

    def test_dry_run_leaves_file_alone(self, tmp_path):
        """Test dry-run reports a change but writes nothing."""
        fstab = tmp_path / "fstab"
        fstab.write_text("", encoding="utf-8")
        assert ensure_entry(str(fstab), swap_entry("/swapfile"), dry_run=True) is True
        assert fstab.read_text(encoding="utf-8") == ""
