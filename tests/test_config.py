"""Tests for VoxelizerConfig and FillStrategy."""

import dataclasses

import pytest

from tri2vox import ConfigError, FillStrategy, VoxelizerConfig


class TestFillStrategy:
    @pytest.mark.parametrize("text", ["run-length", "RUN_LENGTH", "Run-Length", " run_length "])
    def test_parse_run_length(self, text):
        assert FillStrategy.parse(text) is FillStrategy.RUN_LENGTH

    def test_parse_member(self):
        assert FillStrategy.parse(FillStrategy.BRUTE_FORCE) is FillStrategy.BRUTE_FORCE

    def test_parse_unknown(self):
        with pytest.raises(ConfigError, match="unknown fill strategy"):
            FillStrategy.parse("scanline")


class TestVoxelizerConfig:
    def test_defaults(self):
        cfg = VoxelizerConfig()
        assert cfg.granularity == 1.0
        assert cfg.round_input_coordinates is True
        assert cfg.fill_strategy is FillStrategy.BRUTE_FORCE
        assert cfg.epsilon == pytest.approx(1e-6)
        assert cfg.merge_coincident_events is True
        assert cfg.node_name == "default:dirt"
        assert cfg.workers == 1

    def test_strategy_from_string(self):
        assert VoxelizerConfig(fill_strategy="run-length").fill_strategy is FillStrategy.RUN_LENGTH

    def test_granularity_coerced_to_float(self):
        assert isinstance(VoxelizerConfig(granularity=2).granularity, float)

    @pytest.mark.parametrize("value", [0, -1.0, float("nan"), float("inf")])
    def test_bad_granularity(self, value):
        with pytest.raises(ConfigError, match="granularity"):
            VoxelizerConfig(granularity=value)

    @pytest.mark.parametrize("value", [0.0, -1e-6])
    def test_bad_epsilon(self, value):
        with pytest.raises(ConfigError, match="epsilon"):
            VoxelizerConfig(epsilon=value)

    @pytest.mark.parametrize("value", [0, -2, 1.5])
    def test_bad_workers(self, value):
        with pytest.raises(ConfigError, match="workers"):
            VoxelizerConfig(workers=value)

    @pytest.mark.parametrize("field", ["granularity", "epsilon", "workers"])
    @pytest.mark.parametrize("value", ["abc", None, [1]])
    def test_unconvertible_values(self, field, value):
        with pytest.raises(ConfigError, match=field):
            VoxelizerConfig(**{field: value})

    def test_infinite_workers(self):
        with pytest.raises(ConfigError, match="workers"):
            VoxelizerConfig(workers=float("inf"))

    def test_empty_node_name(self):
        with pytest.raises(ConfigError):
            VoxelizerConfig(node_name="")

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            VoxelizerConfig().granularity = 2.0

    def test_with_options(self):
        cfg = VoxelizerConfig().with_options(granularity=0.5, fill_strategy="run-length")
        assert cfg.granularity == 0.5
        assert cfg.fill_strategy is FillStrategy.RUN_LENGTH

    def test_with_options_validates(self):
        with pytest.raises(ConfigError):
            VoxelizerConfig().with_options(granularity=-1)
