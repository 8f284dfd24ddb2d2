"""
Static course catalog shown on the marketing site.
"""

from __future__ import annotations

from typing import Optional

COURSES: tuple[dict, ...] = (
    {
        "id": 1,
        "title": "JavaScript Development",
        "description": (
            "Master modern JavaScript from basics to advanced concepts like "
            "ES6+, async/await, and frameworks."
        ),
        "icon": "💻",
        "features": [
            "ES6+ Syntax",
            "DOM Manipulation",
            "Async Programming",
            "Modern Frameworks",
            "Real-world Projects",
        ],
    },
    {
        "id": 2,
        "title": "Android App Development",
        "description": (
            "Build native Android applications using Kotlin and the latest "
            "Android development tools."
        ),
        "icon": "📱",
        "features": [
            "Kotlin Programming",
            "UI/UX Design",
            "API Integration",
            "Database Management",
            "App Publishing",
        ],
    },
    {
        "id": 3,
        "title": "MERN Stack Development",
        "description": (
            "Become a full-stack developer with MongoDB, Express, React, and Node.js."
        ),
        "icon": "🌐",
        "features": [
            "MongoDB",
            "Express.js",
            "React.js",
            "Node.js",
            "Full-stack Projects",
        ],
    },
    {
        "id": 4,
        "title": "Software Testing",
        "description": (
            "Learn comprehensive testing methodologies including manual and "
            "automated testing."
        ),
        "icon": "🧪",
        "features": [
            "Manual Testing",
            "Automated Testing",
            "Test Planning",
            "Bug Tracking",
            "Performance Testing",
        ],
    },
    {
        "id": 5,
        "title": "Graphic Designing",
        "description": (
            "Master graphic design principles and tools to create stunning "
            "visual content."
        ),
        "icon": "🎨",
        "features": [
            "Adobe Photoshop",
            "Illustrator",
            "UI/UX Design",
            "Typography",
            "Brand Identity",
        ],
    },
    {
        "id": 6,
        "title": "AI-Powered Development",
        "description": (
            "Learn to leverage AI tools to enhance your coding and development "
            "workflow."
        ),
        "icon": "🤖",
        "features": [
            "AI Coding Assistants",
            "Prompt Engineering",
            "AI Integration",
            "Automated Testing",
            "Smart Development",
        ],
    },
)


def list_courses() -> list[dict]:
    return [dict(course) for course in COURSES]


def get_course(course_id: str) -> Optional[dict]:
    """Look up a course by id as it appears in the URL; non-numeric ids match nothing."""
    try:
        wanted = int(course_id)
    except ValueError:
        return None
    for course in COURSES:
        if course["id"] == wanted:
            return dict(course)
    return None
