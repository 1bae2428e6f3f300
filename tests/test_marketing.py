import json

import pytest

from core.errors import DataLoadError, SourceFileError
from core.marketing import load_marketing, read_marketing
from tests.conftest import MARKETING_JSON


class TestReadMarketing:
    def test_fields_parsed_from_camel_case(self, paths):
        data = read_marketing(paths.marketing)
        assert data.year == 2026
        assert data.ytd.mql_achievement == 25
        assert data.monthly[0].sql_actual is None
        assert data.year_on_year[0].mql_yo_y == 26.3
        assert data.prior_years_totals.yoy_growth2026 == 5.3
        assert data.pipeline_gap[0].actual is None

    def test_dump_by_alias_restores_source_shape(self, paths):
        dumped = read_marketing(paths.marketing).model_dump(by_alias=True)
        assert dumped["yearOnYear"][0]["pipelineYoY"] == 14.3
        assert dumped["priorYears"][0]["mql2026Target"] == 100

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceFileError):
            read_marketing(tmp_path / "nope.json")

    def test_invalid_content(self, tmp_path):
        bad = dict(MARKETING_JSON)
        del bad["ytd"]
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(bad), encoding="utf-8")
        with pytest.raises(DataLoadError) as exc_info:
            read_marketing(path)
        assert exc_info.value.code == "INVALID_JSON"

    def test_not_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DataLoadError):
            read_marketing(path)


def test_load_marketing_is_cached(paths):
    first = load_marketing(paths)
    paths.marketing.unlink()
    assert load_marketing(paths) is first
