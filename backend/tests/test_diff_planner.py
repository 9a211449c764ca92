import asyncio
from dataclasses import replace

from candidate_sync.schemas.profile import CertificationEntry, SkillEntry, WorkExperienceEntry
from candidate_sync.schemas.sync import RemoteRecord
from candidate_sync.services.collections import CERTIFICATIONS, SKILLS, join_key_parts
from candidate_sync.services.diff_planner import plan, plan_document
from candidate_sync.services.matching import match
from candidate_sync.services.remote_profile import extract_remote_collections
from candidate_sync.services.sync_executor import SyncExecutor


def _kinds(operations):
    return [(op.kind, op.collection, getattr(op, "id", None)) for op in operations]


def test_content_key_drops_trailing_blank_parts():
    assert join_key_parts("Hackathon Winner", "") == "hackathon winner"
    assert join_key_parts("AWS SAA", " Amazon ") == "aws saa::amazon"
    assert join_key_parts("", "") == ""
    assert join_key_parts("", "Amazon") == "::amazon"


def test_matcher_prefers_identity_over_content_key():
    remote = [
        RemoteRecord(id=1, data={"name": "Go"}),
        RemoteRecord(id=2, data={"name": "Python"}),
    ]
    assert match(SkillEntry(id=1, name="Python"), remote, SKILLS).id == 1
    assert match(SkillEntry(name="python"), remote, SKILLS).id == 2
    assert match(SkillEntry(name="Rust"), remote, SKILLS) is None
    assert match(SkillEntry(name="  "), remote, SKILLS) is None


def test_identity_matches_across_int_and_string_ids():
    remote = [RemoteRecord(id=7, data={"name": "Python"})]
    assert match(SkillEntry(id="7", name="Python"), remote, SKILLS).id == 7


def test_date_format_differences_are_not_updates():
    remote = [RemoteRecord(id=3, data={
        "company": "Acme", "role": "Engineer", "start_date": "2024-01-01", "is_current": False,
    })]
    local = [WorkExperienceEntry(id=3, company="Acme", role="Engineer", start_date="2024-01")]

    assert plan("work_experience", local, remote) == []


def test_changed_field_produces_single_update():
    remote = [RemoteRecord(id=3, data={"company": "Acme", "role": "Engineer", "start_date": "2024-01-01"})]
    local = [WorkExperienceEntry(company="Acme", role="Engineer", start_date="2024-02")]

    operations = plan("work_experience", local, remote)

    assert _kinds(operations) == [("update", "work_experience", 3)]
    assert operations[0].payload["start_date"] == "2024-02-01"


def test_duplicate_local_skills_collapse_onto_one_remote_record():
    remote = [RemoteRecord(id=7, data={"name": "Python"})]
    local = [SkillEntry(name="Python"), SkillEntry(name="python ")]

    operations = plan("skills", local, remote)

    assert len(operations) <= 1
    assert not any(op.kind == "delete" for op in operations)
    assert not any(op.kind == "create" for op in operations)


def test_new_and_removed_records():
    remote = [
        RemoteRecord(id=1, data={"name": "Python"}),
        RemoteRecord(id=2, data={"name": "COBOL"}),
    ]
    local = [SkillEntry(name="Python"), SkillEntry(name="Rust"), SkillEntry(name="")]

    operations = plan("skills", local, remote)

    assert _kinds(operations) == [("create", "skills", None), ("delete", "skills", 2)]
    assert operations[0].payload == {"name": "Rust"}


def test_none_flag_deletes_every_remote_record():
    remote = [
        RemoteRecord(id=11, data={"name": "AWS SAA", "issuing_organization": "Amazon"}),
        RemoteRecord(id=12, data={"name": "CKA", "issuing_organization": "CNCF"}),
    ]
    local = [CertificationEntry(id=11, name="AWS SAA", issuing_organization="Amazon")]

    operations = plan("certifications", local, remote, section_none_flag=True)

    assert _kinds(operations) == [("delete", "certifications", 11), ("delete", "certifications", 12)]


def test_soft_retain_keeps_unclaimed_records():
    spec = replace(CERTIFICATIONS, soft_retain=lambda record: record.data.get("locked"))
    remote = [
        RemoteRecord(id=1, data={"name": "Old", "locked": True}),
        RemoteRecord(id=2, data={"name": "Older"}),
    ]

    operations = plan("certifications", [], remote, spec=spec)

    assert _kinds(operations) == [("delete", "certifications", 2)]


def test_content_key_collision_keeps_first_entry():
    remote = [RemoteRecord(id=5, data={"title": "Dean's List", "issue_date": "2019-01-01"})]
    local = [
        {"title": "Dean's List", "issue_date": "2019-01", "description": "first"},
        {"title": "dean's list", "issue_date": "2019-01-01", "description": "second"},
    ]

    operations = plan("achievements", local, remote)

    assert _kinds(operations) == [("update", "achievements", 5)]
    assert operations[0].payload["description"] == "first"


def test_plan_is_deterministic(document):
    remote = {"skills": [RemoteRecord(id=1, data={"name": "Go"})]}
    first = plan_document(document, remote)
    second = plan_document(document, remote)
    assert [op.model_dump() for op in first] == [op.model_dump() for op in second]


def test_fresher_deletes_all_work_experience(make_document):
    document = make_document(work_experience={"experience_type": "fresher", "entries": [
        {"company": "Acme", "role": "Engineer", "start_date": "2020-07"},
    ]})
    remote = {"work_experience": [RemoteRecord(id=4, data={"company": "Acme", "role": "Engineer"})]}

    operations = [op for op in plan_document(document, remote) if op.collection == "work_experience"]

    assert _kinds(operations) == [("delete", "work_experience", 4)]


def test_plan_apply_refetch_plan_is_empty(fake_api, document):
    fake_api.seed("skills", 1, name="python")
    fake_api.seed("skills", 2, name="Haskell")
    fake_api.seed("certifications", 3, name="AWS SAA", issuing_organization="Amazon", issue_date="2021-01-01")

    async def run():
        remote = extract_remote_collections(await fake_api.fetch_full_profile("jane-doe"))
        operations = plan_document(document, remote)
        result = await SyncExecutor(fake_api).execute(operations)
        assert result.ok
        refetched = extract_remote_collections(await fake_api.fetch_full_profile("jane-doe"))
        return operations, plan_document(document, refetched)

    first, second = asyncio.run(run())

    assert first
    assert second == []
