import hashlib

from click.testing import CliRunner

from hashcash_prover.cli import cli
from hashcash_prover.nonces import SequentialNonceGenerator
from hashcash_prover.prover import Prover, leading_zero_bits


def output_value(result, key: str) -> str:
    for line in result.output.splitlines():
        if line.startswith(f"{key}: "):
            return line.split(": ", 1)[1]
    raise AssertionError(f"{key!r} not found in output: {result.output!r}")


class TestProve:
    """The `prove` command"""

    def test_inline_text_payload(self):
        result = CliRunner().invoke(cli, ["prove", "--data", "hello", "-d", "8", "--no-ui"])
        assert result.exit_code == 0, result.output

        nonce = bytes.fromhex(output_value(result, "nonce"))
        assert nonce == Prover().process(8, b"hello", SequentialNonceGenerator())
        digest = hashlib.sha256(b"hello" + nonce).digest()
        assert output_value(result, "digest") == digest.hex()
        assert leading_zero_bits(digest) >= 8

    def test_payload_file_and_b64_output(self, tmp_path):
        path = tmp_path / "payload.b64"
        path.write_text("aGVsbG8=")
        result = CliRunner().invoke(cli, [
            "prove", "-p", str(path), "-f", "b64", "-d", "4", "-o", "b64", "--no-ui",
        ])
        assert result.exit_code == 0, result.output
        assert output_value(result, "nonce")

    def test_live_ui(self):
        result = CliRunner().invoke(cli, ["prove", "--data", "ui", "-d", "6"])
        assert result.exit_code == 0, result.output
        assert output_value(result, "nonce")

    def test_not_found_exits_nonzero(self):
        result = CliRunner().invoke(cli, ["prove", "-d", "256", "-t", "20", "--no-ui"])
        assert result.exit_code == 1
        assert "No nonce met difficulty 256" in result.output

    def test_unsupported_algorithm(self):
        result = CliRunner().invoke(cli, ["prove", "-d", "1", "-a", "MD-NOPE", "--no-ui"])
        assert result.exit_code == 1
        assert "Unsupported hash algorithm" in result.output

    def test_data_and_data_path_are_exclusive(self, tmp_path):
        path = tmp_path / "payload"
        path.write_bytes(b"x")
        result = CliRunner().invoke(cli, ["prove", "--data", "x", "-p", str(path), "-d", "1"])
        assert result.exit_code == 2

    def test_bad_hex_payload(self):
        result = CliRunner().invoke(cli, ["prove", "--data", "zz", "-f", "hex", "-d", "1"])
        assert result.exit_code == 2
        assert "Invalid hex payload" in result.output

    def test_negative_difficulty_rejected(self):
        result = CliRunner().invoke(cli, ["prove", "-d", "-1"])
        assert result.exit_code == 2

    def test_nonce_plugin(self, tmp_path):
        plugin = tmp_path / "plugin.py"
        plugin.write_text(
            "class Fixed:\n"
            "    def next(self):\n"
            "        return b'\\x2a'\n"
            "\n"
            "def make_nonce_generator():\n"
            "    return Fixed()\n"
        )
        result = CliRunner().invoke(cli, ["prove", "-d", "0", "--nonce-plugin", str(plugin), "--no-ui"])
        assert result.exit_code == 0, result.output
        assert output_value(result, "nonce") == "2a"

    def test_environment_variables(self):
        result = CliRunner().invoke(
            cli,
            ["prove", "--data", "env", "--no-ui"],
            env={"HASHCASH_PROVER_PROVE_DIFFICULTY": "3"},
            auto_envvar_prefix="HASHCASH_PROVER",
        )
        assert result.exit_code == 0, result.output
        digest = bytes.fromhex(output_value(result, "digest"))
        assert leading_zero_bits(digest) >= 3

    def test_verbose_logging(self):
        result = CliRunner().invoke(cli, ["-v", "--json-logs", "prove", "--data", "log", "-d", "2", "--no-ui"])
        assert result.exit_code == 0, result.output


class TestAlgorithms:

    def test_lists_algorithms(self):
        result = CliRunner().invoke(cli, ["algorithms"])
        assert result.exit_code == 0
        assert "SHA-256" in result.output
        assert "BLAKE2b" in result.output
