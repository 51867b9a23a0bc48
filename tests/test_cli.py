"""
Tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from cli.config import ConfigurationManager
from cli.main import CLIContext, cli
from ledger.codec import transaction_to_dict
from ledger.exceptions import ConfigurationError
from ledger.model import Capability

CATEGORY_A = bytes.fromhex("01" * 32)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run from an empty directory so no local config file is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    for variable in ("CASHTOKENS_MAX_COMMITMENT_LENGTH", "CASHTOKENS_MAX_AMOUNT",
                     "CASHTOKENS_DUST_THRESHOLD", "CASHTOKENS_REPORTING_LEVEL"):
        monkeypatch.delenv(variable, raising=False)
    return tmp_path


def write_transactions(path, *transactions):
    documents = [transaction_to_dict(tx) for tx in transactions]
    path.write_text(json.dumps(documents[0] if len(documents) == 1 else documents))
    return str(path)


@pytest.fixture
def valid_transfer(builder_factory):
    return (builder_factory()
            .add_input(CATEGORY_A, amount=100)
            .add_output(CATEGORY_A, amount=60)
            .build())


@pytest.fixture
def inflating_transfer(builder_factory):
    return (builder_factory(bytes.fromhex("cc" * 32))
            .add_input(CATEGORY_A, amount=100)
            .add_output(CATEGORY_A, amount=101)
            .build())


def invoke(runner, args):
    return runner.invoke(cli, args, obj=CLIContext())


class TestValidateCommand:
    
    def test_accepted_transaction_exits_zero(self, runner, workdir, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        
        result = invoke(runner, ["-o", "json", "validate", path])
        
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["metadata"]["accepted"] == 1
        assert data["reports"][0]["burns"][CATEGORY_A.hex()]["amount_burned"] == "40"
    
    def test_rejected_transaction_exits_one(self, runner, workdir, valid_transfer, inflating_transfer):
        path = write_transactions(workdir / "batch.json", valid_transfer, inflating_transfer)
        
        result = invoke(runner, ["-o", "csv", "validate", path])
        
        assert result.exit_code == 1
        assert "SUPPLY_CONSERVATION_VIOLATION" in result.output
    
    def test_multiple_files(self, runner, workdir, valid_transfer):
        first = write_transactions(workdir / "a.json", valid_transfer)
        second = write_transactions(workdir / "b.json", valid_transfer)
        
        result = invoke(runner, ["-o", "json", "validate", "--workers", "2", first, second])
        
        assert result.exit_code == 0
        assert json.loads(result.output)["metadata"]["total_transactions"] == 2
    
    def test_reporting_level_option(self, runner, workdir, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        
        result = invoke(runner, ["-o", "json", "validate", "-l", "detailed", path])
        
        report = json.loads(result.output)["reports"][0]
        assert any("partial burn of 40" in warning for warning in report["warnings"])
    
    def test_table_output_is_default(self, runner, workdir, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        
        result = invoke(runner, ["validate", path])
        
        assert result.exit_code == 0
        assert "accepted" in result.output
    
    def test_malformed_document_exits_two(self, runner, workdir):
        path = workdir / "bad.json"
        path.write_text(json.dumps({"inputs": []}))
        
        result = invoke(runner, ["validate", str(path)])
        
        assert result.exit_code == 2
        assert "txid: Field required" in result.output
    
    def test_invalid_json_exits_two(self, runner, workdir):
        path = workdir / "bad.json"
        path.write_text("{not json")
        
        result = invoke(runner, ["validate", str(path)])
        
        assert result.exit_code == 2
    
    def test_config_file_raises_commitment_limit(self, runner, workdir, builder):
        tx = (builder
              .add_input(CATEGORY_A, capability=Capability.MUTABLE)
              .add_output(CATEGORY_A, capability=Capability.MUTABLE, commitment=b"\x00" * 64)
              .build())
        path = write_transactions(workdir / "tx.json", tx)
        
        assert invoke(runner, ["validate", path]).exit_code == 1
        
        (workdir / ".cashtokens.yml").write_text("protocol:\n  max_commitment_length: 128\n")
        assert invoke(runner, ["validate", path]).exit_code == 0
    
    def test_environment_override(self, runner, workdir, monkeypatch, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        monkeypatch.setenv("CASHTOKENS_REPORTING_LEVEL", "minimal")
        
        result = invoke(runner, ["-o", "json", "validate", path])
        
        assert "burns" not in json.loads(result.output)["reports"][0]
    
    def test_invalid_reporting_level_from_environment_exits_two(self, runner, workdir,
                                                                monkeypatch, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        monkeypatch.setenv("CASHTOKENS_REPORTING_LEVEL", "verbose")
        
        result = invoke(runner, ["validate", path])
        
        assert result.exit_code == 2
        assert "Invalid reporting level 'verbose'" in result.output
    
    def test_invalid_reporting_level_from_file_exits_two(self, runner, workdir, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        (workdir / ".cashtokens.yml").write_text("reporting:\n  level: everything\n")
        
        result = invoke(runner, ["validate", path])
        
        assert result.exit_code == 2
        assert "Invalid reporting level" in result.output
    
    def test_zero_workers_exits_two(self, runner, workdir, valid_transfer):
        path = write_transactions(workdir / "tx.json", valid_transfer)
        
        result = invoke(runner, ["validate", "--workers", "0", path])
        
        assert result.exit_code == 2
        assert "--workers" in result.output


class TestConfigCommand:
    
    def test_show_json(self, runner, workdir, monkeypatch):
        monkeypatch.setenv("CASHTOKENS_DUST_THRESHOLD", "1000")
        
        result = invoke(runner, ["-o", "json", "config", "show"])
        
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["protocol"]["dust_threshold"] == 1000
        assert data["protocol"]["max_commitment_length"] == 40
        assert data["sources"] == ["defaults", "environment"]
    
    def test_show_text(self, runner, workdir):
        result = invoke(runner, ["config", "show"])
        
        assert result.exit_code == 0
        assert "protocol.max_commitment_length" in result.output
        assert "reporting.level" in result.output
    
    def test_invalid_config_exits_two(self, runner, workdir, monkeypatch):
        monkeypatch.setenv("CASHTOKENS_MAX_COMMITMENT_LENGTH", "-1")
        
        result = invoke(runner, ["config", "show"])
        
        assert result.exit_code == 2
        assert "Invalid protocol configuration" in result.output
    
    def test_missing_config_file_exits_two(self, runner, workdir):
        result = invoke(runner, ["-c", str(workdir / "missing.yml"), "config", "show"])
        
        assert result.exit_code == 2
        assert "Config file not found" in result.output


class TestConfigurationManager:
    
    def test_precedence(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"protocol": {"dust_threshold": 1, "max_commitment_length": 80}}))
        
        manager = ConfigurationManager(str(config_file), environ={"CASHTOKENS_DUST_THRESHOLD": "7"})
        
        assert manager.get("protocol.dust_threshold") == 7
        assert manager.get("protocol.max_commitment_length") == 80
        assert manager.get("reporting.level") == "standard"
        assert manager.get("protocol.missing", "fallback") == "fallback"
        assert manager.get_sources() == ["defaults", f"file:{config_file}", "environment"]
    
    def test_protocol_config(self, workdir):
        manager = ConfigurationManager(environ={"CASHTOKENS_MAX_AMOUNT": "1000"})
        
        assert manager.protocol_config().max_amount == 1000
    
    def test_unknown_protocol_key_rejected(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("protocol:\n  max_supply: 10\n")
        
        manager = ConfigurationManager(str(config_file), environ={})
        
        with pytest.raises(ConfigurationError):
            manager.protocol_config()
    
    def test_unsupported_file_format(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("")
        
        with pytest.raises(ConfigurationError, match="Unknown config file format"):
            ConfigurationManager(str(config_file), environ={}).load()
    
    def test_non_mapping_file_rejected(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("- a\n- b\n")
        
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            ConfigurationManager(str(config_file), environ={}).load()
    
    def test_unknown_reporting_level_rejected(self, tmp_path):
        manager = ConfigurationManager(environ={"CASHTOKENS_REPORTING_LEVEL": "loud"})
        
        with pytest.raises(ConfigurationError, match="Invalid reporting level"):
            manager.load()
    
    def test_reporting_section_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("reporting: detailed\n")
        
        with pytest.raises(ConfigurationError, match="reporting section"):
            ConfigurationManager(str(config_file), environ={}).load()
