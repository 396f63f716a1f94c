from pathlib import Path

import pytest

from pairer.run import main, run_pipeline


def _exports(student_record, preceptor_record, write_exports, reciprocal=True):
    students = [
        student_record(last="Doe", first="Jane", practice=(1, 2, 3, 4)),
        student_record(last="Roe", first="Rick", gender="M", practice=(4, 3, 2, 1), pre_match="Smith, Alex"),
        student_record(last="Poe", first="Edgar", practice=(1, 1, 2, 3)),
    ]
    preceptors = [
        preceptor_record(last="Smith", first="Alex", pre_match="Rick Roe" if reciprocal else ""),
        preceptor_record(last="Brown", first="Kay", practice_type="Pedi", location="Eastside"),
        preceptor_record(last="Green", first="Lou", practice_type="Internist"),
    ]
    return write_exports(students, preceptors)


def test_cli_prints_table(student_record, preceptor_record, write_exports, capsys):
    students, preceptors = _exports(student_record, preceptor_record, write_exports)

    assert main([str(students), str(preceptors)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert "match_kind" in out[0]
    assert "Roe, Rick" in out[1] and "pre" in out[1]
    assert "Doe, Jane" in out[2] and "Brown, Kay" in out[2]
    assert "Poe, Edgar" in out[3] and "unmatched" in out[3]


def test_cli_writes_csv(student_record, preceptor_record, write_exports, tmp_path: Path):
    students, preceptors = _exports(student_record, preceptor_record, write_exports)
    output = tmp_path / "report.csv"

    code = main([str(students), str(preceptors), "--format", "csv", "--output", str(output)])

    assert code == 0
    lines = output.read_text().splitlines()
    assert lines[0] == "name;match_kind;counterpart;location;category;preferred_day;quality"
    assert lines[2].startswith("Doe, Jane;algorithmic;Brown, Kay;Eastside;Pedi;Monday;")


def test_cli_writes_table_into_new_directory(student_record, preceptor_record, write_exports, tmp_path: Path):
    students, preceptors = _exports(student_record, preceptor_record, write_exports)
    output = tmp_path / "reports" / "2026" / "pairs.txt"

    assert main([str(students), str(preceptors), "--output", str(output)]) == 0

    lines = output.read_text(encoding="utf-8").splitlines()
    assert "match_kind" in lines[0]
    assert "Doe, Jane" in lines[2] and "Brown, Kay" in lines[2]


def test_cli_uses_config_file(student_record, preceptor_record, write_exports, tmp_path: Path):
    students, preceptors = _exports(student_record, preceptor_record, write_exports)
    config = tmp_path / "config.yaml"
    output = tmp_path / "report.csv"
    config.write_text(f"output:\n  format: csv\n  path: {output}\n", encoding="utf-8")

    assert main([str(students), str(preceptors), "--config", str(config)]) == 0
    assert output.read_text().startswith("name;match_kind")


def test_cli_returns_one_on_pre_match_conflict(student_record, preceptor_record, write_exports, tmp_path: Path):
    students, preceptors = _exports(student_record, preceptor_record, write_exports, reciprocal=False)
    output = tmp_path / "report.csv"

    assert main([str(students), str(preceptors), "--output", str(output)]) == 1
    assert not output.exists()


def test_cli_returns_one_on_missing_file(tmp_path: Path):
    assert main([str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]) == 1


def test_cli_usage_error_exits_two():
    with pytest.raises(SystemExit) as excinfo:
        main(["only-one-argument.csv"])
    assert excinfo.value.code == 2


def test_run_pipeline_returns_evaluation(student_record, preceptor_record, write_exports):
    students, preceptors = _exports(student_record, preceptor_record, write_exports)
    result = run_pipeline(str(students), str(preceptors))

    assert result["success"]
    assert len(result["records"]) == 3
    assert result["unmatched_preceptors"] == ["Green, Lou"]
    assert result["evaluation"].counts == {"pre": 1, "algorithmic": 1, "unmatched": 1}
