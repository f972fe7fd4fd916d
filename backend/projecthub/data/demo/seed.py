"""
Demo fixtures.

Five projects owned by the demo user with their tasks, activity, files,
three collaborator contacts, memberships and two project chat rooms.
Chat timestamps are relative to the moment the store is built so the
rooms always look recently active.
"""

from copy import deepcopy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

DEMO_USER_ID = "demo-user-123"
ADMIN_USER_ID = "admin-user-456"

DEMO_USER: Dict[str, Any] = {
    "id": DEMO_USER_ID,
    "email": "demo@projecthub.com",
    "full_name": "Demo User",
    "avatar_url": None,
    "bio": "Exploring ProjectHub features",
    "role": "user",
    "created_at": "2025-01-01T00:00:00Z",
}

ADMIN_USER: Dict[str, Any] = {
    "id": ADMIN_USER_ID,
    "email": "admin@projecthub.com",
    "full_name": "Admin User",
    "avatar_url": None,
    "bio": "System Administrator",
    "role": "admin",
    "created_at": "2025-01-01T00:00:00Z",
}

DEMO_CONTACTS: List[Dict[str, Any]] = [
    {
        "id": "contact-1",
        "email": "maria.petrova@university.edu",
        "full_name": "Dr. Maria Petrova",
        "avatar_url": None,
        "bio": "Project Lead, Sofia University",
        "role": "user",
        "created_at": "2025-02-01T09:00:00Z",
    },
    {
        "id": "contact-2",
        "email": "j.smith@euagency.eu",
        "full_name": "John Smith",
        "avatar_url": None,
        "bio": "Program Manager, EU Digital Agency",
        "role": "user",
        "created_at": "2025-03-12T10:30:00Z",
    },
    {
        "id": "contact-3",
        "email": "anna@techcorp.com",
        "full_name": "Anna Ivanova",
        "avatar_url": None,
        "bio": "CTO, TechCorp Solutions",
        "role": "user",
        "created_at": "2025-04-20T14:15:00Z",
    },
]

DEMO_PROJECTS: List[Dict[str, Any]] = [
    {
        "id": "proj-1",
        "user_id": DEMO_USER_ID,
        "title": "Research Project Alpha",
        "description": (
            "Comprehensive research on AI applications in project management. "
            "This multi-year study examines how artificial intelligence can optimize "
            "project workflows, predict risks, and improve team collaboration across "
            "diverse project environments."
        ),
        "project_type": "Academic & Research",
        "status": "active",
        "visibility": "public",
        "start_date": "2025-10-01",
        "end_date": "2026-06-30",
        "budget": 85000,
        "funding_source": "National Science Foundation",
        "cover_image_url": None,
        "progress_percentage": 65,
        "created_at": "2025-10-01T08:00:00Z",
        "updated_at": "2026-01-15T14:30:00Z",
    },
    {
        "id": "proj-2",
        "user_id": DEMO_USER_ID,
        "title": "Corporate Website Redesign",
        "description": (
            "Complete overhaul of company website with modern design, improved UX, "
            "and responsive layout. Includes new CMS integration, performance "
            "optimization, and accessibility improvements for better user engagement."
        ),
        "project_type": "Corporate/Business",
        "status": "active",
        "visibility": "private",
        "start_date": "2025-11-01",
        "end_date": None,
        "budget": 45000,
        "funding_source": None,
        "cover_image_url": None,
        "progress_percentage": 45,
        "created_at": "2025-11-01T09:00:00Z",
        "updated_at": "2026-01-14T16:45:00Z",
    },
    {
        "id": "proj-3",
        "user_id": DEMO_USER_ID,
        "title": "EU Digital Skills Initiative",
        "description": (
            "Multi-country initiative to improve digital literacy across underserved "
            "communities. Partnership with 5 EU member states to deliver comprehensive "
            "training programs, workshops, and certification courses."
        ),
        "project_type": "EU-Funded Project",
        "status": "planning",
        "visibility": "public",
        "start_date": "2026-02-01",
        "end_date": "2027-12-31",
        "budget": 250000,
        "funding_source": "Erasmus+ Programme",
        "cover_image_url": None,
        "progress_percentage": 15,
        "created_at": "2026-01-01T10:00:00Z",
        "updated_at": "2026-01-10T11:20:00Z",
    },
    {
        "id": "proj-4",
        "user_id": DEMO_USER_ID,
        "title": "Public Health Campaign",
        "description": (
            "Community health awareness and vaccination campaign targeting rural areas. "
            "Includes mobile clinics, educational workshops, social media outreach, and "
            "partnership with local healthcare providers."
        ),
        "project_type": "Public Initiative",
        "status": "active",
        "visibility": "public",
        "start_date": "2025-07-01",
        "end_date": "2026-03-31",
        "budget": 120000,
        "funding_source": "Ministry of Health",
        "cover_image_url": None,
        "progress_percentage": 80,
        "created_at": "2025-07-01T08:30:00Z",
        "updated_at": "2026-01-13T15:10:00Z",
    },
    {
        "id": "proj-5",
        "user_id": DEMO_USER_ID,
        "title": "Personal Portfolio Website",
        "description": (
            "Personal developer portfolio showcasing projects, blog posts, and technical "
            "articles. Built with modern web technologies including responsive design, "
            "dark mode, and optimized performance."
        ),
        "project_type": "Personal/Other",
        "status": "completed",
        "visibility": "public",
        "start_date": "2024-01-01",
        "end_date": "2024-06-30",
        "budget": None,
        "funding_source": None,
        "cover_image_url": None,
        "progress_percentage": 100,
        "created_at": "2024-01-01T12:00:00Z",
        "updated_at": "2024-06-30T18:00:00Z",
    },
]


def _task(
    id: str,
    project_id: str,
    title: str,
    description: str,
    status: str,
    priority: str,
    due_date: Any,
    assigned_to: Any,
    created_at: str,
    updated_at: str,
) -> Dict[str, Any]:
    return {
        "id": id,
        "project_id": project_id,
        "title": title,
        "description": description,
        "status": status,
        "priority": priority,
        "due_date": due_date,
        "assigned_to": assigned_to,
        "created_at": created_at,
        "updated_at": updated_at,
    }


DEMO_TASKS: List[Dict[str, Any]] = [
    # Research Project Alpha
    _task("task-1", "proj-1", "Literature review and background research",
          "Comprehensive review of existing research on AI in project management, "
          "covering 50+ academic papers and industry reports",
          "done", "high", None, DEMO_USER_ID, "2025-10-05T09:00:00Z", "2025-11-10T16:30:00Z"),
    _task("task-2", "proj-1", "Design research methodology",
          "Create detailed research methodology including data collection methods, "
          "sample selection, and analysis framework",
          "done", "high", None, DEMO_USER_ID, "2025-10-10T10:00:00Z", "2025-11-20T14:00:00Z"),
    _task("task-3", "proj-1", "Conduct interviews with industry experts",
          "Schedule and conduct 15-20 structured interviews with project management "
          "professionals from various industries",
          "in_progress", "medium", "2026-02-28", DEMO_USER_ID,
          "2025-11-01T11:00:00Z", "2026-01-15T13:20:00Z"),
    _task("task-4", "proj-1", "Analyze collected data",
          "Statistical analysis of interview data and pattern identification using "
          "qualitative and quantitative methods",
          "todo", "high", "2026-04-30", None, "2025-11-15T12:00:00Z", "2025-11-15T12:00:00Z"),
    _task("task-5", "proj-1", "Prepare final research paper",
          "Write, format, and prepare research findings for academic publication in "
          "peer-reviewed journal",
          "todo", "medium", "2026-06-15", None, "2025-12-01T13:00:00Z", "2025-12-01T13:00:00Z"),
    # Corporate Website Redesign
    _task("task-6", "proj-2", "Create wireframes and mockups",
          "Design comprehensive wireframes for all major pages and user flows",
          "done", "high", None, DEMO_USER_ID, "2025-11-05T09:30:00Z", "2025-11-25T17:00:00Z"),
    _task("task-7", "proj-2", "Develop homepage and main sections",
          "Frontend development of homepage, about, services, and contact sections "
          "with responsive design",
          "in_progress", "high", "2026-02-01", DEMO_USER_ID,
          "2025-11-20T10:00:00Z", "2026-01-14T15:30:00Z"),
    _task("task-8", "proj-2", "Implement CMS integration",
          "Integrate headless CMS for easy content management and updates by "
          "non-technical team members",
          "in_progress", "medium", "2026-02-15", DEMO_USER_ID,
          "2025-12-01T11:00:00Z", "2026-01-12T14:20:00Z"),
    _task("task-9", "proj-2", "Testing and quality assurance",
          "Comprehensive testing including functionality, performance, accessibility, "
          "and cross-browser compatibility",
          "todo", "high", "2026-03-01", None, "2025-12-10T12:00:00Z", "2025-12-10T12:00:00Z"),
    # EU Digital Skills Initiative
    _task("task-10", "proj-3", "Submit project proposal to EU commission",
          "Prepare and submit comprehensive project proposal including budget, "
          "timeline, and expected outcomes",
          "done", "high", None, DEMO_USER_ID, "2025-11-01T08:00:00Z", "2025-12-15T16:00:00Z"),
    _task("task-11", "proj-3", "Partner recruitment and agreements",
          "Recruit partner organizations from 5 EU countries and finalize "
          "collaboration agreements",
          "in_progress", "high", "2026-01-31", DEMO_USER_ID,
          "2025-12-15T09:00:00Z", "2026-01-10T11:15:00Z"),
    _task("task-12", "proj-3", "Develop training curriculum",
          "Create comprehensive digital skills curriculum covering basic to advanced topics",
          "todo", "medium", "2026-03-15", None, "2026-01-05T10:00:00Z", "2026-01-05T10:00:00Z"),
    # Public Health Campaign
    _task("task-13", "proj-4", "Secure funding and government approvals",
          "Obtain necessary funding and regulatory approvals from health ministry",
          "done", "high", None, DEMO_USER_ID, "2025-07-05T08:00:00Z", "2025-08-01T17:00:00Z"),
    _task("task-14", "proj-4", "Establish mobile clinic schedule",
          "Create detailed schedule for mobile clinic visits across 20 rural communities",
          "done", "medium", None, DEMO_USER_ID, "2025-08-01T09:00:00Z", "2025-09-15T16:00:00Z"),
    _task("task-15", "proj-4", "Community outreach and registration",
          "Conduct community outreach, register participants, and schedule "
          "vaccination appointments",
          "in_progress", "medium", "2026-02-01", DEMO_USER_ID,
          "2025-09-01T10:00:00Z", "2026-01-13T14:50:00Z"),
    _task("task-16", "proj-4", "Campaign evaluation and final reporting",
          "Evaluate campaign effectiveness and prepare comprehensive report for "
          "health ministry",
          "todo", "low", "2026-03-31", None, "2025-10-01T11:00:00Z", "2025-10-01T11:00:00Z"),
    # Personal Portfolio Website
    _task("task-17", "proj-5", "Design responsive layout and UI",
          "Create modern, responsive design with dark mode support",
          "done", "medium", None, DEMO_USER_ID, "2024-01-15T10:00:00Z", "2024-02-28T15:00:00Z"),
    _task("task-18", "proj-5", "Implement blog with Markdown support",
          "Build blog functionality with Markdown support and syntax highlighting",
          "done", "medium", None, DEMO_USER_ID, "2024-03-01T11:00:00Z", "2024-05-15T16:00:00Z"),
    _task("task-19", "proj-5", "Deploy to production with CI/CD",
          "Set up continuous deployment pipeline and deploy to production",
          "done", "high", None, DEMO_USER_ID, "2024-06-15T12:00:00Z", "2024-06-30T18:00:00Z"),
]


def _update(id: str, project_id: str, update_type: str, text: str, created_at: str) -> Dict[str, Any]:
    return {
        "id": id,
        "project_id": project_id,
        "user_id": DEMO_USER_ID,
        "update_type": update_type,
        "update_text": text,
        "metadata": {},
        "created_at": created_at,
    }


DEMO_UPDATES: List[Dict[str, Any]] = [
    _update("upd-1", "proj-1", "milestone",
            "Project kickoff meeting completed successfully with all stakeholders",
            "2025-10-01T14:00:00Z"),
    _update("upd-2", "proj-1", "task_completed",
            "Completed comprehensive literature review phase - analyzed 52 research papers",
            "2025-11-15T16:30:00Z"),
    _update("upd-3", "proj-1", "general",
            "Monthly progress update: 65% complete, on track for June 2026 delivery. "
            "Interview phase progressing well.",
            "2026-01-10T10:00:00Z"),
    _update("upd-4", "proj-2", "milestone",
            "Design phase completed - all wireframes and mockups approved by stakeholders",
            "2025-12-01T15:00:00Z"),
    _update("upd-5", "proj-2", "general",
            "Homepage development 70% complete - implementing responsive design and animations",
            "2026-01-12T14:20:00Z"),
    _update("upd-6", "proj-3", "status_changed",
            "Project status changed from Draft to Planning after EU commission approval",
            "2026-01-02T09:00:00Z"),
    _update("upd-7", "proj-3", "milestone",
            "Received official approval from EU commission - funding confirmed at €250,000",
            "2026-01-08T11:00:00Z"),
    _update("upd-8", "proj-4", "milestone",
            "Successfully conducted 50+ vaccination sessions across rural communities",
            "2026-01-05T13:00:00Z"),
    _update("upd-9", "proj-4", "general",
            "Major milestone: Reached 5,000 community members through outreach programs",
            "2026-01-13T15:10:00Z"),
    _update("upd-10", "proj-5", "status_changed",
            "Project marked as completed - portfolio live and fully functional",
            "2024-06-30T18:00:00Z"),
]


def _file(
    id: str,
    project_id: str,
    task_id: Any,
    file_name: str,
    file_type: str,
    file_size: int,
    category: str,
    caption: str,
    uploaded_at: str,
) -> Dict[str, Any]:
    return {
        "id": id,
        "project_id": project_id,
        "task_id": task_id,
        "file_url": "#",
        "file_name": file_name,
        "file_type": file_type,
        "file_size": file_size,
        "category": category,
        "caption": caption,
        "uploaded_by": DEMO_USER_ID,
        "uploaded_at": uploaded_at,
    }


DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

DEMO_FILES: List[Dict[str, Any]] = [
    _file("file-1", "proj-1", None, "research-methodology.pdf", "application/pdf", 2456789,
          "document", "Detailed research methodology document", "2025-10-15T10:30:00Z"),
    _file("file-2", "proj-1", "task-3", "interview-template.docx", DOCX, 156789,
          "document", "Standardized interview questions template", "2025-11-05T14:00:00Z"),
    _file("file-3", "proj-2", "task-6", "homepage-mockup.png", "image/png", 3456789,
          "image", "Final homepage design mockup", "2025-11-25T16:45:00Z"),
    _file("file-4", "proj-2", "task-6", "wireframes.pdf", "application/pdf", 5678901,
          "document", "Complete wireframes for all pages", "2025-11-10T11:20:00Z"),
    _file("file-5", "proj-3", "task-10", "eu-project-proposal.pdf", "application/pdf", 8901234,
          "deliverable", "Official EU funding proposal submission", "2025-11-20T09:15:00Z"),
    _file("file-6", "proj-4", None, "campaign-poster.jpg", "image/jpeg", 2345678,
          "image", "Health campaign promotional poster", "2025-08-15T13:30:00Z"),
    _file("file-7", "proj-4", None, "progress-report-q4-2025.pdf", "application/pdf", 4567890,
          "report", "Quarterly progress report for Q4 2025", "2026-01-05T10:00:00Z"),
]

DEMO_MEMBERS: List[Dict[str, Any]] = [
    {"id": "member-1", "project_id": "proj-1", "user_id": "contact-1",
     "role": "member", "created_at": "2025-10-02T09:00:00Z"},
    {"id": "member-2", "project_id": "proj-2", "user_id": "contact-3",
     "role": "member", "created_at": "2025-11-02T09:00:00Z"},
    {"id": "member-3", "project_id": "proj-3", "user_id": "contact-2",
     "role": "member", "created_at": "2026-01-02T09:00:00Z"},
]


def _chat_fixtures(now: datetime) -> Dict[str, List[Dict[str, Any]]]:
    def ago(seconds: int) -> str:
        return (now - timedelta(seconds=seconds)).isoformat()

    rooms = [
        {
            "id": "room-1",
            "name": "Website Redesign Team",
            "description": None,
            "room_type": "project",
            "project_id": "proj-1",
            "created_by": DEMO_USER_ID,
            "participant_ids": [DEMO_USER_ID, ADMIN_USER_ID, "contact-1", "contact-3"],
            "created_at": ago(86400),
            "last_message_at": ago(1800),
        },
        {
            "id": "room-2",
            "name": "Marketing Campaign",
            "description": None,
            "room_type": "project",
            "project_id": "proj-2",
            "created_by": DEMO_USER_ID,
            "participant_ids": [DEMO_USER_ID, "contact-2", "contact-3"],
            "created_at": ago(172800),
            "last_message_at": ago(7200),
        },
    ]
    messages = [
        {"id": "msg-1", "room_id": "room-1", "user_id": DEMO_USER_ID,
         "message": "Hey team! Just updated the project timeline.",
         "reply_to_id": None, "created_at": ago(3600)},
        {"id": "msg-2", "room_id": "room-1", "user_id": ADMIN_USER_ID,
         "message": "Great! Can you also review the budget?",
         "reply_to_id": "msg-1", "created_at": ago(1800)},
        {"id": "msg-3", "room_id": "room-2", "user_id": DEMO_USER_ID,
         "message": "Starting work on the marketing materials.",
         "reply_to_id": None, "created_at": ago(7200)},
    ]
    return {"rooms": rooms, "messages": messages}


def build_seed(now: datetime = None) -> Dict[str, List[Dict[str, Any]]]:
    """
    Fresh, independent copies of every demo collection.

    Callers may mutate the result freely; the module-level fixtures are
    never touched.
    """
    now = now or datetime.now(timezone.utc)
    chat = _chat_fixtures(now)
    return {
        "users": deepcopy([DEMO_USER, ADMIN_USER] + DEMO_CONTACTS),
        "projects": deepcopy(DEMO_PROJECTS),
        "tasks": deepcopy(DEMO_TASKS),
        "updates": deepcopy(DEMO_UPDATES),
        "files": deepcopy(DEMO_FILES),
        "members": deepcopy(DEMO_MEMBERS),
        "rooms": chat["rooms"],
        "messages": chat["messages"],
    }
