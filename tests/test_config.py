"""Tests for RunConfig loading and size parsing."""

import pytest

from unison_stack.config import PACKAGE_MAP, RunConfig, load_config, parse_size_mib
from unison_stack.errors import ConfigError


class TestParseSizeMib:
    """Tests for swap size strings."""

    def test_gigabytes_are_multiplied(self):
        """Test G suffix converts to MiB (x1024), either case."""
        assert parse_size_mib("2G") == 2048
        assert parse_size_mib("1g") == 1024

    def test_megabytes_pass_through(self):
        """Test M suffix is already MiB."""
        assert parse_size_mib("512M") == 512
        assert parse_size_mib("768m") == 768

    @pytest.mark.parametrize("bad", ["3X", "", "G", "1.5G", "-1G", "2GB", " 2G", "2 G"])
    def test_malformed_sizes_rejected(self, bad):
        """Test anything but <int><M|G> is a configuration error."""
        with pytest.raises(ConfigError, match="Unsupported SWAP_SIZE"):
            parse_size_mib(bad)


class TestRunConfig:
    """Tests for the RunConfig dataclass."""

    def test_defaults(self):
        """Test defaults match the stock installer."""
        cfg = RunConfig()
        assert cfg.swap_size == "2G"
        assert cfg.swap_size_mib == 2048
        assert cfg.min_ram_mb == 2048
        assert cfg.swap_file == "/swapfile"
        assert str(cfg.unison_bin) == "/usr/local/bin/unison"
        assert cfg.preferred_compilers[0] == "ocaml-base-compiler.4.14.2"
        assert dict(cfg.package_map) == PACKAGE_MAP

    def test_is_immutable(self):
        """Test RunConfig cannot be changed after construction."""
        cfg = RunConfig()
        with pytest.raises(AttributeError):
            cfg.swap_size = "1G"  # type: ignore[misc]

    def test_is_hashable(self):
        """Test equal configs hash alike, package map included."""
        assert hash(RunConfig()) == hash(RunConfig())
        assert RunConfig() == RunConfig()

    def test_package_map_is_read_only(self):
        """Test the package map can be changed neither through the config nor its source."""
        source = {"git": "git"}
        cfg = RunConfig(package_map=source)
        with pytest.raises(TypeError):
            cfg.package_map["hg"] = "mercurial"  # type: ignore[index]
        source["hg"] = "mercurial"
        assert dict(cfg.package_map) == {"git": "git"}

    @pytest.mark.parametrize("bad", ["", "U", "USA", "u1", "us"])
    def test_bad_fallback_country_rejected(self, bad):
        """Test the Wi-Fi fallback must be a two-letter upper-case code."""
        with pytest.raises(ConfigError, match="two-letter"):
            RunConfig(wifi_fallback_country=bad)

    def test_bad_size_rejected_on_construction(self):
        """Test validation happens when the config is built."""
        with pytest.raises(ConfigError):
            RunConfig(swap_size="3X")

    def test_package_map_order(self):
        """Test the probe map keeps its declared order."""
        assert list(PACKAGE_MAP)[:3] == ["git", "hg", "darcs"]
        assert PACKAGE_MAP["make"] == "build-essential"
        assert PACKAGE_MAP["bwrap"] == "bubblewrap"


class TestLoadConfig:
    """Tests for layered config loading."""

    def test_environment_overrides(self):
        """Test SWAP_SIZE and MIN_RAM_MB are read from the environment."""
        cfg = load_config(environ={"SWAP_SIZE": "1G", "MIN_RAM_MB": "1024"})
        assert cfg.swap_size_mib == 1024
        assert cfg.min_ram_mb == 1024

    def test_flags_applied(self):
        """Test flag values land in the config."""
        cfg = load_config(environ={}, assume_yes=True, dry_run=True)
        assert cfg.assume_yes is True
        assert cfg.dry_run is True

    def test_malformed_env_size_rejected(self):
        """Test SWAP_SIZE=3X fails while loading, before any stage runs."""
        with pytest.raises(ConfigError):
            load_config(environ={"SWAP_SIZE": "3X"})

    def test_non_integer_threshold_rejected(self):
        """Test MIN_RAM_MB must be an integer."""
        with pytest.raises(ConfigError, match="MIN_RAM_MB"):
            load_config(environ={"MIN_RAM_MB": "lots"})

    def test_yaml_file_then_environment(self, tmp_path):
        """Test environment wins over the YAML file."""
        p = tmp_path / "installer.yaml"
        p.write_text(
            "swap:\n"
            "  size: 4G\n"
            "  min_ram_mb: 4096\n"
            "  file: /var/swap\n"
            "paths:\n"
            "  bin_dir: /opt/bin\n"
            "opam:\n"
            "  preferred_compilers: [ocaml-base-compiler.5.1.1]\n"
            "wifi:\n"
            "  fallback_country: gb\n",
            encoding="utf-8",
        )
        cfg = load_config(config_path=str(p), environ={"SWAP_SIZE": "512M"})
        assert cfg.swap_size == "512M"
        assert cfg.min_ram_mb == 4096
        assert cfg.swap_file == "/var/swap"
        assert str(cfg.unison_bin) == "/opt/bin/unison"
        assert cfg.preferred_compilers == ("ocaml-base-compiler.5.1.1",)
        assert cfg.wifi_fallback_country == "GB"

    def test_yaml_must_be_mapping(self, tmp_path):
        """Test a top-level list is rejected."""
        p = tmp_path / "installer.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path=str(p), environ={})

    def test_yaml_bad_compiler_list(self, tmp_path):
        """Test preferred_compilers must be a list of strings."""
        p = tmp_path / "installer.yml"
        p.write_text("opam:\n  preferred_compilers: 4.14.2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="preferred_compilers"):
            load_config(config_path=str(p), environ={})

    def test_yaml_bad_fallback_country(self, tmp_path):
        """Test a fallback country from the file is checked like any other value."""
        p = tmp_path / "installer.yaml"
        p.write_text("wifi:\n  fallback_country: USA\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="two-letter"):
            load_config(config_path=str(p), environ={})

    def test_missing_config_file(self, tmp_path):
        """Test a missing --config path is a configuration error."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_path=str(tmp_path / "nope.yaml"), environ={})
