"""
Demo Data Seeder for GatePass

Creates:
- 1 approver (mentor), 3 students assigned to them, 1 checkpoint operator
- Bearer tokens for each demo user, printed for use with curl or the docs UI

With --walkthrough it then drives one pass through the whole lifecycle
against a running server: apply, approve, scan, scan again.

Both this script and the server must share JWT_PRIVATE_KEY (.env) so the
printed tokens verify.

    alembic upgrade head
    python seed_demo_data.py --walkthrough
"""
import sys

import requests

from gatepass.database import SessionLocal
from gatepass.models.user import Role, StudentMentor, User
from gatepass.utils.jwt_utils import create_access_token

API_URL = "http://localhost:8000"

DEMO_MENTOR = {"email": "mentor.rao@campus.edu", "name": "Dr. Rao", "role": Role.APPROVER}
DEMO_CHECKPOINT = {"email": "gate.north@campus.edu", "name": "North Gate", "role": Role.CHECKPOINT}
DEMO_STUDENTS = [
    {"email": "asha.k@campus.edu", "name": "Asha K", "role": Role.STUDENT},
    {"email": "vikram.s@campus.edu", "name": "Vikram S", "role": Role.STUDENT},
    {"email": "meera.p@campus.edu", "name": "Meera P", "role": Role.STUDENT},
]


def get_or_create_user(db, data) -> User:
    user = db.query(User).filter(User.email == data["email"]).first()
    if user:
        return user
    user = User(**data)
    db.add(user)
    db.flush()
    return user


def seed():
    db = SessionLocal()
    try:
        mentor = get_or_create_user(db, DEMO_MENTOR)
        checkpoint = get_or_create_user(db, DEMO_CHECKPOINT)
        students = [get_or_create_user(db, s) for s in DEMO_STUDENTS]

        for student in students:
            exists = db.query(StudentMentor).filter(StudentMentor.student_id == student.id).first()
            if not exists:
                db.add(StudentMentor(student_id=student.id, mentor_id=mentor.id))

        db.commit()
        users = [mentor, checkpoint, *students]
        return {u.email: (u.id, create_access_token(u.id, u.role.value)) for u in users}
    finally:
        db.close()


def walkthrough(tokens):
    def headers(email):
        return {"Authorization": f"Bearer {tokens[email][1]}"}

    student = DEMO_STUDENTS[0]["email"]

    resp = requests.post(
        f"{API_URL}/student/apply",
        json={"reason": "Medical appointment"},
        headers=headers(student),
    )
    if resp.status_code != 201:
        print(f"  ❌ Apply failed ({resp.status_code}): {resp.text[:200]}")
        sys.exit(1)
    pass_id = resp.json()["id"]
    print(f"  ✓ Applied           {pass_id}")

    resp = requests.post(f"{API_URL}/mentor/requests/{pass_id}/approve", headers=headers(DEMO_MENTOR["email"]))
    print(f"  ✓ Approved          {resp.json()['status']}")

    passes = requests.get(f"{API_URL}/student/passes", headers=headers(student)).json()["items"]
    scan_url = next(p for p in passes if p["id"] == pass_id)["redemption"]["scan_url"]

    for attempt in ("first", "second"):
        path = scan_url.split("/security/", 1)[1]
        resp = requests.get(f"{API_URL}/security/{path}", headers=headers(DEMO_CHECKPOINT["email"]))
        print(f"  ✓ Scan ({attempt}):    {resp.json()['outcome']}")


def main():
    print("\n🌱 Seeding demo data for GatePass...\n")
    tokens = seed()
    for email, (user_id, token) in tokens.items():
        print(f"  {email:<28} {user_id}\n    Bearer {token}\n")

    if "--walkthrough" in sys.argv:
        print("Walking one pass through its lifecycle...")
        walkthrough(tokens)


if __name__ == "__main__":
    main()
