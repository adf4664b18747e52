import io
import json

import pytest

import rcp_cli

SECRET = "Hallo-123"
TWO_FIELDS_TEST_SALT = "a85a29e01f295cba43de859a097b6f816826a0ef47bad9d210ab1410cc6ea8490f72a99e62c27b3aefd3b334b1a034d1b8ba1b8b0c6599c27674aeb96cebd591"


def _run(capsys, *argv):
    code = rcp_cli.main(list(argv))
    out = capsys.readouterr()
    return code, out.out.strip(), out.err


def test_sign_fields(capsys):
    code, out, _ = _run(
        capsys, "--secret", SECRET, "--no-time",
        "sign", "--salt", "TestSalt", "--field", "b=test", "--field", "a= long test",
    )
    assert code == 0
    assert out == TWO_FIELDS_TEST_SALT


def test_sign_json_file(capsys, tmp_path):
    body = tmp_path / "body.json"
    body.write_text(json.dumps({"b": "test", "a": " long test"}), encoding="utf-8")
    code, out, _ = _run(capsys, "--secret", SECRET, "--no-time", "sign", "--salt", "TestSalt", "--json", str(body))
    assert code == 0
    assert out == TWO_FIELDS_TEST_SALT


def test_sign_json_stdin(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"b": "test", "a": " long test"}'))
    code, out, _ = _run(capsys, "--secret", SECRET, "--no-time", "sign", "--salt", "TestSalt", "--json", "-")
    assert out == TWO_FIELDS_TEST_SALT


def test_secret_from_env(capsys, monkeypatch):
    monkeypatch.setenv("RCP_SHARED_SECRET", SECRET)
    monkeypatch.setenv("RCP_USE_TIME_COMPONENT", "0")
    code, out, _ = _run(capsys, "sign", "--salt", "TestSalt", "--field", "b=test", "--field", "a= long test")
    assert out == TWO_FIELDS_TEST_SALT


def test_verify_valid_and_invalid(capsys):
    args = ["--secret", SECRET, "--no-time", "verify", "--salt", "TestSalt", "--field", "b=test", "--field", "a= long test"]
    code, out, _ = _run(capsys, *args, "--checksum", TWO_FIELDS_TEST_SALT)
    assert (code, out) == (0, "valid")
    code, out, _ = _run(capsys, *args, "--checksum", "0" * 128)
    assert (code, out) == (1, "invalid")


def test_sign_then_verify_with_time(capsys):
    _, checksum, _ = _run(capsys, "--secret", SECRET, "sign", "--salt", "/api", "--field", "n=1")
    code, out, _ = _run(capsys, "--secret", SECRET, "verify", "--salt", "/api", "--field", "n=1", "--checksum", checksum)
    assert (code, out) == (0, "valid")


def test_json_must_be_object(capsys, tmp_path):
    body = tmp_path / "body.json"
    body.write_text("[1, 2]", encoding="utf-8")
    code, _, err = _run(capsys, "--secret", SECRET, "sign", "--json", str(body))
    assert code == 2
    assert "JSON object" in err


def test_bad_field_syntax(capsys):
    with pytest.raises(SystemExit) as exc:
        rcp_cli.main(["--secret", SECRET, "sign", "--field", "novalue"])
    assert exc.value.code == 2


def test_negative_time_delta_flag(capsys):
    code, _, err = _run(capsys, "--time-delta", "-3", "sign")
    assert code == 2
    assert "time_delta" in err


def test_doctor(capsys):
    code, out, _ = _run(capsys, "--secret", "x" * 32, "doctor")
    assert code == 0
    code, out, _ = _run(capsys, "doctor")
    assert code == 1
    assert "hint:" in out


def test_missing_secret_file_exits_2(capsys, monkeypatch, tmp_path):
    monkeypatch.setenv("RCP_SHARED_SECRET_FILE", str(tmp_path / "does-not-exist"))
    code, out, err = _run(capsys, "--no-time", "sign", "--salt", "x")
    assert code == 2
    assert out == ""
    assert "RCP_SHARED_SECRET_FILE not found" in err
