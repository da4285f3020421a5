"""End-to-end tests for the command line entry point."""

import json

import pytest

from cvrfeval import session
from cvrfeval.main import parse_args, run
from cvrfeval.parser import parse_index_markup, parse_model_markup


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "results"


def _run(*argv) -> int:
    return run(parse_args([str(a) for a in argv]))


class TestArgs:
    def test_defaults(self) -> None:
        args = parse_args(["doc.xml", "--cpe", "cpe:/o:x:y:1"])
        assert args.source == "doc.xml"
        assert args.output_dir == "results"
        assert not args.index
        assert args.model_out is None

    def test_cpe_is_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["doc.xml"])


class TestRun:
    def test_single_document(self, sample_path, rhel7_cpe, output_dir) -> None:
        assert _run(sample_path, "--cpe", rhel7_cpe, "--output-dir", output_dir) == 0

        assert (output_dir / "results.xml").exists()
        assert (output_dir / "vulnerable.txt").read_text() == "CVE-2016-7543\n"
        data = json.loads((output_dir / "results.json").read_text())
        assert data["metadata"]["total_succeeded"] == 1
        assert data["documents"][0]["product_id"] == "7Server-7.4.Z"

    def test_model_out(self, tmp_path, sample_path, rhel7_cpe, output_dir) -> None:
        model_out = tmp_path / "model.xml"
        args = [sample_path, "--cpe", rhel7_cpe, "--output-dir", output_dir, "--model-out", model_out]
        assert _run(*args) == 0
        assert model_out.read_bytes().startswith(b"<?xml")

    def test_unknown_cpe(self, sample_path, output_dir) -> None:
        assert _run(sample_path, "--cpe", "cpe:/o:other:os:1", "--output-dir", output_dir) == 1
        assert not (output_dir / "results.xml").exists()
        data = json.loads((output_dir / "results.json").read_text())
        assert data["metadata"]["total_failed"] == 1
        assert data["errors"]

    def test_missing_source(self, tmp_path, rhel7_cpe, output_dir) -> None:
        assert _run(tmp_path / "absent.xml", "--cpe", rhel7_cpe, "--output-dir", output_dir) == 1
        assert not output_dir.exists()

    def test_index_manifest(self, tmp_path, sample_path, output_dir) -> None:
        manifest = tmp_path / "list.txt"
        manifest.write_text(f"{sample_path}\nmissing.xml\n")
        model_out = tmp_path / "index.xml"
        argv = [
            manifest, "--index", "--cpe", "cpe:/o:redhat:enterprise_linux:6",
            "--output-dir", output_dir, "--model-out", model_out,
        ]
        assert _run(*argv) == 0

        data = json.loads((output_dir / "results.json").read_text())
        assert data["metadata"]["total_documents"] == 2
        assert data["metadata"]["total_succeeded"] == 1
        assert (output_dir / "results.xml").exists()
        assert model_out.exists()

    def test_index_nothing_evaluated(self, tmp_path, sample_path, output_dir) -> None:
        manifest = tmp_path / "list.txt"
        manifest.write_text(f"{sample_path}\n")
        argv = [manifest, "--index", "--cpe", "cpe:/o:other:os:1", "--output-dir", output_dir]
        assert _run(*argv) == 1
        assert not (output_dir / "results.xml").exists()

    def test_model_out_reuses_parsed_document(self, tmp_path, sample_path, rhel7_cpe, output_dir, monkeypatch) -> None:
        parsed = []
        real_parse = session.parse_model

        def counting_parse(cursor):
            model = real_parse(cursor)
            parsed.append(model)
            return model

        monkeypatch.setattr(session, "parse_model", counting_parse)
        model_out = tmp_path / "model.xml"
        args = [sample_path, "--cpe", rhel7_cpe, "--output-dir", output_dir, "--model-out", model_out]
        assert _run(*args) == 0
        assert len(parsed) == 1
        assert parse_model_markup(model_out.read_bytes()) == parsed[0]

    def test_index_model_out_reuses_parsed_documents(self, tmp_path, sample_path, output_dir, monkeypatch) -> None:
        calls = []
        real_parse = session.parse_model
        monkeypatch.setattr(session, "parse_model", lambda cursor: calls.append(1) or real_parse(cursor))
        manifest = tmp_path / "list.txt"
        manifest.write_text(f"{sample_path}\n")
        model_out = tmp_path / "index.xml"
        argv = [
            manifest, "--index", "--cpe", "cpe:/o:redhat:enterprise_linux:7",
            "--output-dir", output_dir, "--model-out", model_out,
        ]
        assert _run(*argv) == 0
        assert len(calls) == 1
        assert len(parse_index_markup(model_out.read_bytes()).models) == 1

    def test_undecodable_manifest(self, tmp_path, output_dir) -> None:
        manifest = tmp_path / "list.txt"
        manifest.write_bytes(b"\xff\xfe\x00bad.xml\n")
        argv = [manifest, "--index", "--cpe", "cpe:/o:x:y:1", "--output-dir", output_dir]
        assert _run(*argv) == 1
        data = json.loads((output_dir / "results.json").read_text())
        assert "not UTF-8" in data["errors"][0]
