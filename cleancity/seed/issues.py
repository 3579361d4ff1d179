# Seed data: demo issues covering every category and status
#
# Coverage:
#   Statuses  : Pending (4), In Progress (2), Completed (2)
#   Categories: all 6 represented
#   Special   : overdue entries, one issue without location, quoted titles

from ..assignment import assign_issue_to_nearest
from ..config import HOUR_MS, now_ms
from ..issues import create_issue, update_issue
from ..models import IssueCreate, IssuePatch

PROOF_PLACEHOLDER = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="

DEMO_ISSUES = [
    # 1. fresh garbage pile next to the sanitation worker
    {"title": "Overflowing garbage bin near Janpath market",
     "description": "The community bin has not been cleared for three days and waste is spilling onto the footpath.",
     "category": "Garbage", "location": {"lat": 28.6141, "lng": 77.2188},
     "address": "Janpath Market, Connaught Place", "age_hours": 2, "status": "Pending"},

    # 2. pipeline leak, in progress
    {"title": "Water main leaking on Baba Kharak Singh Marg",
     "description": "Clean water has been gushing from a cracked pipe since morning, the road is flooding.",
     "category": "Broken Pipeline", "location": {"lat": 28.6254, "lng": 77.2131},
     "address": "Baba Kharak Singh Marg", "age_hours": 10, "status": "In Progress"},

    # 3. street light, overdue
    {"title": "Street light out at \"Gate 3\" of the park",
     "description": "The lamp post at the park entrance has been dark for two nights, the stretch is unsafe after 8pm.",
     "category": "Street Light", "location": {"lat": 28.6008, "lng": 77.1935},
     "address": "Nehru Park, Gate 3", "age_hours": 30, "status": "Pending"},

    # 4. pothole routed to General
    {"title": "Deep pothole in the left lane",
     "description": "A pothole about half a metre wide has opened up in the left lane, two-wheelers are swerving into traffic.",
     "category": "Pothole", "location": {"lat": 28.6315, "lng": 77.2167},
     "address": "Outer Circle, Block B", "age_hours": 5, "status": "In Progress"},

    # 5. encroachment, completed with proof
    {"title": "Vendor stalls blocking footpath",
     "description": "Temporary stalls occupy the full width of the footpath, pedestrians are forced onto the road.",
     "category": "Encroachment", "location": {"lat": 28.6289, "lng": 77.2065},
     "address": "Panchkuian Road", "age_hours": 40, "status": "Completed"},

    # 6. no location: stays unassigned
    {"title": "",
     "description": "Stray cattle gather every evening outside the school gate and block the entrance.",
     "category": "Other", "location": None, "address": "Gole Market", "age_hours": 1,
     "status": "Pending"},

    # 7. completed garbage pickup
    {"title": "Construction debris dumped on service lane",
     "description": "A truck unloaded bricks and rubble on the service lane overnight.",
     "category": "Garbage", "location": {"lat": 28.6172, "lng": 77.2043},
     "address": "Service lane behind Patel Chowk", "age_hours": 26, "status": "Completed"},

    # 8. overdue pipeline issue, still pending
    {"title": "Sewer overflow outside metro exit",
     "description": "Sewage water is collecting at the metro exit, commuters have to wade through it.",
     "category": "Broken Pipeline", "location": {"lat": 28.6328, "lng": 77.2197},
     "address": "Rajiv Chowk Metro, Gate 7", "age_hours": 48, "status": "Pending"},
]


def import_issues(store, now=None) -> list:
    """Create demo issues, backdated by age_hours, and run auto-assignment on each."""
    print("\n  Importing demo issues...")
    now = now_ms() if now is None else now
    created = []
    for i, d in enumerate(DEMO_ISSUES):
        created_at = now - d["age_hours"] * HOUR_MS
        issue = create_issue(store, IssueCreate(
            title=d["title"], description=d["description"], category=d["category"],
            location=d["location"], address=d["address"], created_by="seed"), now=created_at)
        result = assign_issue_to_nearest(store, issue.id, now=created_at)
        if d["status"] != "Pending":
            proof = PROOF_PLACEHOLDER if d["status"] == "Completed" else None
            update_issue(store, issue.id, IssuePatch(status=d["status"], proof_image_url=proof),
                         now=created_at + HOUR_MS)
        created.append(issue)
        tag = {"Completed": "OK", "In Progress": "WIP", "Pending": "NEW"}[d["status"]]
        print(f"    [{i+1:2d}/{len(DEMO_ISSUES)}] {tag:3s}  {result.outcome.value:18s}  {issue.title[:48]}")
    print(f"  => {len(created)} issues imported")
    return created
