import pytest

from candidate_sync.services.resume_data import (
    extract_user_data_patch,
    split_skills,
    transform_resume_data,
)

RAW_RESUME = {
    "name": "Jane Q Doe",
    "email": "jane@example.com",
    "phone_number": "+1 555 0100",
    "summary": "Backend engineer",
    "education": [
        {"degree": "BSc", "field_of_study": "Computer Science", "school": "UofT",
         "startDate": "Sep 2016", "graduation_date": "2020"},
        {"gpa": "3.9"},
    ],
    "experience": [
        {"company_name": "Acme", "position": "Engineer", "from": "2020-07", "to": "2022-01", "current": "yes"},
        {"company": "No Role Inc"},
    ],
    "skills": "Python, SQL; python\nDocker",
    "projects": [{"title": "Resume Builder", "description": "Side project", "startDate": "2021"}],
    "certificates": [{"title": "AWS SAA", "issuer": "Amazon", "date": "Jan 2021"}],
    "awards": [{"name": "Hackathon Winner", "date": "2019-03"}],
    "languages": ["English", {"name": "French", "proficiency": "Intermediate"}],
}


def test_transforms_raw_resume_fields():
    patch = transform_resume_data(RAW_RESUME)

    assert patch["basic_info"] == {
        "first_name": "Jane",
        "last_name": "Q Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
        "bio": "Backend engineer",
    }
    assert patch["education"]["entries"] == [{
        "course_name": "BSc",
        "major": "Computer Science",
        "institution": "UofT",
        "start_date": "2016-09-01",
        "end_date": "2020-01-01",
    }]

    work = patch["work_experience"]
    assert work["experience_type"] == "experienced"
    assert len(work["entries"]) == 1
    assert work["entries"][0]["is_current"] is True
    # A current role has no end date
    assert work["entries"][0]["end_date"] == ""

    assert [entry["name"] for entry in patch["skills"]["entries"]] == ["Python", "SQL", "Docker"]
    assert patch["projects"]["entries"][0]["project_name"] == "Resume Builder"
    assert patch["projects"]["no_projects"] is False
    assert patch["certifications"]["entries"][0]["issuing_organization"] == "Amazon"
    assert patch["certifications"]["entries"][0]["issue_date"] == "2021-01-01"
    assert patch["achievements"]["entries"][0]["title"] == "Hackathon Winner"
    assert patch["languages"]["entries"][1] == {
        "language": "French", "speaking": "Intermediate", "reading": "Intermediate", "writing": "Intermediate",
    }


def test_text_experience_marks_candidate_experienced():
    patch = transform_resume_data({"experience": "5 years building APIs"})
    assert patch == {"work_experience": {"experience_type": "experienced", "entries": []}}


def test_empty_sections_are_left_out():
    assert transform_resume_data({"education": [], "skills": ""}) == {}


@pytest.mark.parametrize(
    "key",
    ["resume", "data", "parsed_data", "parsedData", "resume_data", "resumeData", "userData"],
)
def test_patch_found_under_any_candidate_key(key):
    payload = {"parsing_status": "parsed", key: {"name": "Jane Doe", "skills": ["Go"]}}

    patch = extract_user_data_patch(payload)

    assert patch["basic_info"] == {"first_name": "Jane", "last_name": "Doe"}
    assert patch["skills"] == {"entries": [{"name": "Go"}]}


def test_sectioned_data_is_used_as_is():
    payload = {"data": {
        "basicInfo": {"firstName": "Jane"},
        "workExperience": {"experienceType": "fresher"},
        "otherDetails": {
            "languages": [{"language": "English"}],
            "availability": "Immediately",
        },
    }}

    patch = extract_user_data_patch(payload)

    assert patch == {
        "basic_info": {"firstName": "Jane"},
        "work_experience": {"experienceType": "fresher"},
        "languages": {"entries": [{"language": "English"}]},
        "preferences": {"availability": "Immediately"},
    }


def test_sectioned_data_wins_over_raw_fields():
    payload = {"data": {
        "skills": {"entries": [{"name": "Rust"}]},
        "resume_data": {"name": "Jane Doe", "skills": ["Python"]},
    }}

    patch = extract_user_data_patch(payload)

    assert patch["skills"] == {"entries": [{"name": "Rust"}]}
    assert patch["basic_info"]["first_name"] == "Jane"


@pytest.mark.parametrize("payload", [None, "parsed", {}, {"parsing_status": "parsed"}, {"data": {}}])
def test_nothing_usable_gives_empty_patch(payload):
    assert extract_user_data_patch(payload) == {}


def test_split_skills_keeps_first_spelling():
    assert split_skills(["Python", {"name": "python"}, " SQL ", 3]) == ["Python", "SQL"]
    assert split_skills(None) == []
