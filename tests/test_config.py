"""Tests for YAML configuration loading and parameter validation."""

import logging
from datetime import datetime, timezone

import pytest
import yaml

from revisit_eo.config import (
    AnalysisConfig,
    AnalysisParameters,
    ConstellationConfig,
    DaytimeWindow,
    SatelliteOrbitSpec,
    load_config,
    save_config,
)
from revisit_eo.exceptions import ConfigurationError


def _write_yaml(tmp_path, data, name="config.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump(data) if not isinstance(data, str) else data)
    return str(path)


class TestLoadConfig:

    def test_full_config(self, tmp_path):
        path = _write_yaml(tmp_path, {
            'start_date': '2025-06-01T00:00:00Z',
            'time_span_hours': 12,
            'grid_resolution_deg': 2.5,
            'swath_width_km': 80,
            'only_daytime_revisit': True,
            'local_daytime_start': 900,
            'local_daytime_end': 1500,
            'max_workers': 3,
            'satellites': [
                {'name': 'A', 'altitude_km': 500, 'inclination_deg': 97.4},
                {'altitude_km': 600, 'inclination_deg': 53, 'swath_width_km': 200},
            ],
            'constellation': {
                'type': 'walker',
                'total_satellites': 6,
                'planes': 3,
                'phasing': 1,
                'base': {'name': 'W', 'altitude_km': 550, 'inclination_deg': 53},
            },
            'output_dir': 'out',
        })
        config = load_config(path)
        params = config.parameters

        assert params.start_date == datetime(2025, 6, 1, tzinfo=timezone.utc)
        assert params.time_span_hours == 12.0
        assert params.grid_resolution_deg == 2.5
        assert params.swath_width_km == 80.0
        assert params.daytime == DaytimeWindow(900, 1500)
        assert config.max_workers == 3
        assert [s.name for s in config.satellites] == ['A', 'SAT-2']
        assert config.satellites[1].swath_width_km == 200.0
        assert config.constellation.type == 'walker'
        assert config.constellation.base.name == 'W'
        assert str(config.output_path) == 'out'

    def test_defaults_for_empty_file(self, tmp_path):
        config = load_config(_write_yaml(tmp_path, ""))
        params = config.parameters
        assert params.time_span_hours == 24.0
        assert params.grid_resolution_deg == 1.0
        assert params.swath_width_km == 120.0
        assert params.daytime is None
        assert params.start_date is None
        assert config.satellites == []
        assert config.constellation is None

    def test_yaml_date_accepted(self, tmp_path):
        config = load_config(_write_yaml(tmp_path, "start_date: 2025-06-01\n"))
        assert config.parameters.start_date == datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_end_date_sets_time_span(self, tmp_path):
        config = load_config(_write_yaml(tmp_path, {
            'start_date': '2025-01-01T00:00:00+00:00',
            'end_date': '2025-01-02T12:00:00+00:00',
            'time_span_hours': 5,
        }))
        assert config.parameters.effective_time_span_hours == pytest.approx(36.0)

    @pytest.mark.parametrize("data", [
        {'time_span_hours': 0},
        {'time_span_hours': -3},
        {'grid_resolution_deg': 0},
        {'grid_resolution_deg': -1.0},
        {'swath_width_km': 0},
        {'only_daytime_revisit': True, 'local_daytime_start': 1800, 'local_daytime_end': 1000},
        {'start_date': '2025-01-02T00:00:00Z', 'end_date': '2025-01-01T00:00:00Z'},
        {'start_date': 'yesterday'},
        {'time_span_hours': 'long'},
        {'time_span_hours': float('inf')},
        {'grid_resolution_deg': float('inf')},
        {'swath_width_km': float('nan')},
    ])
    def test_invalid_parameters_rejected(self, tmp_path, data):
        with pytest.raises(ConfigurationError):
            load_config(_write_yaml(tmp_path, data))

    def test_quoted_early_morning_codes(self, tmp_path):
        config = load_config(_write_yaml(tmp_path, (
            "only_daytime_revisit: true\n"
            "local_daytime_start: \"0700\"\n"
            "local_daytime_end: \"0930\"\n"
        )))
        assert config.parameters.daytime == DaytimeWindow(700, 930)

    def test_malformed_daytime_code_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write_yaml(tmp_path, "only_daytime_revisit: true\nlocal_daytime_start: \"7am\"\n"))

    def test_non_mapping_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write_yaml(tmp_path, "- just\n- a list\n"))

    def test_fine_grid_logs_warning(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="revisit_eo.config"):
            load_config(_write_yaml(tmp_path, {'grid_resolution_deg': 0.05}))
        assert "very fine" in caplog.text


class TestAnalysisParameters:

    def test_time_span_used_without_end_date(self):
        params = AnalysisParameters(time_span_hours=6.0, start_date=datetime(2025, 1, 1, tzinfo=timezone.utc))
        assert params.effective_time_span_hours == 6.0

    def test_bool_is_not_a_number(self):
        with pytest.raises(ConfigurationError):
            AnalysisParameters(time_span_hours=True).validate()

    @pytest.mark.parametrize("kwargs", [
        {'grid_resolution_deg': float('inf')},
        {'time_span_hours': float('inf')},
        {'time_span_hours': float('nan')},
    ])
    def test_non_finite_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            AnalysisParameters(**kwargs).validate()


class TestSaveConfig:

    def test_save_then_load(self, tmp_path):
        config = AnalysisConfig(
            parameters=AnalysisParameters(
                time_span_hours=6.0,
                grid_resolution_deg=2.0,
                start_date=datetime(2025, 6, 1, tzinfo=timezone.utc),
                daytime=DaytimeWindow(800, 1600),
            ),
            satellites=[SatelliteOrbitSpec(name='S1', altitude_km=500.0, inclination_deg=97.0, mean_anomaly_deg=12.0)],
            constellation=ConstellationConfig(
                type='train', base=SatelliteOrbitSpec(name='T', altitude_km=450.0, inclination_deg=45.0),
                total_satellites=3,
            ),
            max_workers=2,
        )
        path = tmp_path / "saved.yaml"
        save_config(config, str(path))
        loaded = load_config(str(path))

        assert loaded.parameters == config.parameters
        assert loaded.satellites == config.satellites
        assert loaded.constellation == config.constellation
        assert loaded.max_workers == 2

    def test_daytime_codes_saved_zero_padded(self, tmp_path):
        config = AnalysisConfig(parameters=AnalysisParameters(daytime=DaytimeWindow(700, 1100)))
        path = tmp_path / "saved.yaml"
        save_config(config, str(path))

        raw = yaml.safe_load(path.read_text())
        assert raw['local_daytime_start'] == '0700'
        assert load_config(str(path)).parameters.daytime == DaytimeWindow(700, 1100)
