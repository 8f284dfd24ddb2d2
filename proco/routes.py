"""
HTTP routes for the Proco API.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from proco.courses import get_course, list_courses
from proco.db import INQUIRY_STATUSES, InquiryRecord, ProjectRecord
from proco.dependencies import (
    AppContext,
    get_broadcaster,
    get_context,
    get_inquiry_store,
    get_project_store,
)
from proco.notifications import EventType, NotificationBroadcaster, NotificationEvent
from proco.schemas import (
    InquiryCreate,
    InquiryStatusUpdate,
    ProjectCreate,
    ProjectPublishUpdate,
)
from proco.storage import FallbackRecordStore

router = APIRouter()

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


# Projects


@router.get("/projects")
def get_projects(store: FallbackRecordStore = Depends(get_project_store)):
    return {"success": True, "data": store.list()}


@router.post("/projects", status_code=201)
def create_project(
    payload: Optional[ProjectCreate] = None,
    store: FallbackRecordStore = Depends(get_project_store),
):
    if payload is None:
        payload = ProjectCreate()
    if not payload.is_complete():
        raise HTTPException(status_code=400, detail="All fields are required")
    record = ProjectRecord(
        title=payload.title,
        description=payload.description,
        details=payload.details,
        image=payload.image,
        technologies=payload.technologies,
        published=bool(payload.published),
    )
    return {"success": True, "data": store.create(record.as_document())}


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: str, store: FallbackRecordStore = Depends(get_project_store)
):
    if store.delete(project_id) is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return {"success": True, "message": "Project deleted successfully"}


@router.patch("/projects/{project_id}")
def update_project_published(
    project_id: str,
    payload: Optional[ProjectPublishUpdate] = None,
    store: FallbackRecordStore = Depends(get_project_store),
):
    if payload is None:
        payload = ProjectPublishUpdate()
    if payload.published is None:
        raise HTTPException(status_code=400, detail="Published must be true or false")
    project = store.update_field(project_id, "published", payload.published)
    if project is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return {"success": True, "data": project}


# Inquiries


@router.get("/inquiries")
def get_inquiries(store: FallbackRecordStore = Depends(get_inquiry_store)):
    inquiries = store.list()
    return {
        "success": True,
        "count": len(inquiries),
        "data": inquiries,
        "mode": store.mode,
    }


@router.post("/inquiries", status_code=201)
def create_inquiry(
    payload: Optional[InquiryCreate] = None,
    store: FallbackRecordStore = Depends(get_inquiry_store),
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
):
    if payload is None:
        payload = InquiryCreate()
    if not payload.is_complete():
        raise HTTPException(
            status_code=400, detail="Please provide all required fields"
        )
    record = InquiryRecord(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        course=payload.course,
        message=payload.message,
    )
    inquiry = store.create(record.as_document())
    broadcaster.publish(NotificationEvent(EventType.NEW_INQUIRY, inquiry))
    return {
        "success": True,
        "message": "Inquiry submitted successfully",
        "data": inquiry,
        "mode": store.mode,
    }


@router.patch("/inquiries/{inquiry_id}/status")
def update_inquiry_status(
    inquiry_id: str,
    payload: Optional[InquiryStatusUpdate] = None,
    store: FallbackRecordStore = Depends(get_inquiry_store),
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
):
    if payload is None:
        payload = InquiryStatusUpdate()
    if payload.status not in INQUIRY_STATUSES:
        raise HTTPException(
            status_code=400,
            detail="Invalid status. Must be one of: new, pending, completed",
        )
    inquiry = store.update_field(inquiry_id, "status", payload.status)
    if inquiry is None:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    broadcaster.publish(NotificationEvent(EventType.INQUIRY_STATUS_UPDATED, inquiry))
    return {
        "success": True,
        "message": "Inquiry status updated successfully",
        "data": inquiry,
        "mode": store.mode,
    }


@router.delete("/inquiries/{inquiry_id}")
def delete_inquiry(
    inquiry_id: str,
    store: FallbackRecordStore = Depends(get_inquiry_store),
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
):
    if store.delete(inquiry_id) is None:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    broadcaster.publish(NotificationEvent(EventType.INQUIRY_DELETED, {"_id": inquiry_id}))
    return {"success": True, "message": "Inquiry deleted successfully"}


# Courses


@router.get("/courses")
def get_courses():
    courses = list_courses()
    return {"success": True, "count": len(courses), "data": courses}


@router.get("/courses/{course_id}")
def get_course_by_id(course_id: str):
    course = get_course(course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"success": True, "data": course}


# Notifications


@router.get("/notifications/subscribe")
async def subscribe_notifications(
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
):
    """
    Open a server-sent event stream. The first frame is CONNECTED; every
    inquiry change afterwards arrives as one `data:` frame.
    """
    subscription = broadcaster.register()
    return StreamingResponse(
        broadcaster.stream(subscription),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


# Health


@router.get("/health")
def health(context: AppContext = Depends(get_context)):
    return {
        "status": "Server is running",
        "mongodb": "connected" if context.mongodb_connected else "disconnected",
        "mode": context.mode,
        "notifications": {"subscribers": context.broadcaster.subscriber_count},
    }
