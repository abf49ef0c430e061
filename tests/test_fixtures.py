import pytest

from arch_token_metadata.constants import ATTRIBUTES_ACCOUNT_LEN, METADATA_ACCOUNT_LEN
from arch_token_metadata.fixtures import FIXTURES_VERSION, build_fixtures, load_fixtures, write_fixtures


def test_checked_in_corpus_is_current(golden):
    assert build_fixtures() == golden


def test_version_is_stamped(golden):
    assert golden["Version"] == FIXTURES_VERSION


def test_write_then_load(tmp_path):
    fixtures = build_fixtures()
    out = write_fixtures(tmp_path / "nested" / "fixtures.json", fixtures)
    assert out.exists()
    assert load_fixtures(out) == fixtures


@pytest.mark.parametrize("sample", ["Sample", "Sample2"])
def test_sample_accounts_fill_program_allocation(golden, sample):
    assert len(bytes.fromhex(golden[sample]["metadata_account"])) == METADATA_ACCOUNT_LEN == 865
    assert len(bytes.fromhex(golden[sample]["attributes_account"])) == ATTRIBUTES_ACCOUNT_LEN == 1060
