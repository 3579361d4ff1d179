from cleancity import importer
from cleancity.issues import list_issues
from cleancity.models import IssueStatus
from cleancity.seed.issues import DEMO_ISSUES, import_issues
from cleancity.sla import overdue_issues
from cleancity.store import JsonFileStore

from conftest import T0


class TestImportIssues:
    def test_demo_set(self, seeded_store):
        created = import_issues(seeded_store, now=T0)
        assert len(created) == len(DEMO_ISSUES) == 8
        issues = list_issues(seeded_store)
        assert {i.category.value for i in issues} == {
            "Garbage", "Broken Pipeline", "Street Light", "Pothole", "Encroachment", "Other"}

    def test_statuses_and_proof(self, seeded_store):
        import_issues(seeded_store, now=T0)
        issues = list_issues(seeded_store)
        done = [i for i in issues if i.status == IssueStatus.COMPLETED]
        assert len(done) == 2
        assert all(i.proof_image_url for i in done)
        assert sum(1 for i in issues if i.status == IssueStatus.IN_PROGRESS) == 2

    def test_unlocated_issue_stays_unassigned(self, seeded_store):
        import_issues(seeded_store, now=T0)
        unassigned = [i for i in list_issues(seeded_store) if not i.assigned_to_worker_id]
        assert [i.title for i in unassigned] == ["Other issue"]

    def test_backdated_issues_are_overdue(self, seeded_store):
        import_issues(seeded_store, now=T0)
        late = overdue_issues(list_issues(seeded_store), T0)
        assert sorted(i.title for i in late) == [
            "Sewer overflow outside metro exit",
            'Street light out at "Gate 3" of the park',
        ]


class TestImporterMain:
    def test_runs_once_then_skips(self, tmp_path, monkeypatch, capsys):
        data_file = tmp_path / "cleancity.json"
        monkeypatch.setattr(importer, "STORE_BACKEND", "json")
        monkeypatch.setattr(importer, "DATA_FILE", str(data_file))

        importer.main()
        assert len(JsonFileStore(data_file).list_issues()) == 8
        assert "IMPORT COMPLETE" in capsys.readouterr().out

        importer.main()
        assert "SKIP" in capsys.readouterr().out
        assert len(JsonFileStore(data_file).list_issues()) == 8
