import pytest
import yaml

from bike_demand.utils import load_config, resolve_path
from config.settings import CONFIG_PATH, DEFAULT_CONFIG, PROJECT_ROOT


class TestLoadConfig:

    def test_defaults_are_a_copy(self):
        config = load_config()
        config['model']['manual_order'].append(99)

        assert DEFAULT_CONFIG['model']['manual_order'] == [1, 1, 7]

    def test_shipped_config_matches_defaults(self):
        assert load_config(CONFIG_PATH)['model'] == DEFAULT_CONFIG['model']

    def test_partial_override(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'forecast': {'horizon': 14}}))

        config = load_config(path)

        assert config['forecast']['horizon'] == 14
        assert config['forecast']['levels'] == [80, 95]
        assert config['evaluation']['holdout'] == 25

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text('')
        assert load_config(path) == DEFAULT_CONFIG

    def test_unknown_section(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'prophet': {'changepoints': 25}}))

        with pytest.raises(ValueError, match="prophet"):
            load_config(path)

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'forecast': 30}))

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    @pytest.mark.parametrize('document', [
        [{'forecast': {'horizon': 3}}],
        ['forecast', 'model'],
        'forecast',
    ])
    def test_top_level_must_be_mapping(self, tmp_path, document):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump(document))

        with pytest.raises(ValueError, match="mapping of sections"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / 'missing.yaml')


class TestResolvePath:

    def test_absolute_path_unchanged(self, tmp_path):
        assert resolve_path(tmp_path / 'day.csv') == tmp_path / 'day.csv'

    def test_relative_falls_back_to_project_root(self):
        assert resolve_path('data/raw/does_not_exist.csv') == PROJECT_ROOT / 'data/raw/does_not_exist.csv'
