import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.utils import timezone

from ..models import SiteMembership, SupportTicket, Unit
from .audit_helper import log_action

logger = logging.getLogger(__name__)

TICKET_MANAGER_ROLES = ("admin", "board_member")
DONE_STATUSES = ("resolved", "closed")


def can_manage_tickets(user, site):
    """Site admins and board members work on every ticket of the site."""
    return user.is_superuser or user.role_for(site) in TICKET_MANAGER_ROLES


def visible_tickets(user, site, status=None):
    """Managers see the whole site, everybody else only what they opened."""
    tickets = SupportTicket.objects.for_site(site).select_related("unit", "created_by", "assigned_to")
    if not can_manage_tickets(user, site):
        tickets = tickets.filter(created_by=user)
    if status:
        tickets = tickets.filter(status=status)
    return tickets


@transaction.atomic
def open_ticket(user, site, title, description="", category="other", priority="medium"):
    """Any active member may open a ticket; it is linked to a unit they own at the site."""
    if not user.is_superuser and user.role_for(site) is None:
        raise PermissionDenied("Only members of the site can open tickets")
    ticket = SupportTicket(
        site=site,
        unit=Unit.objects.for_site(site).filter(owner=user).order_by("unit_number").first(),
        title=(title or "").strip(),
        description=description or "",
        category=category or "other",
        priority=priority or "medium",
        created_by=user,
    )
    ticket.save()
    log_action(action="create", instance=ticket, user=user, site=site,
               changes={"title": ticket.title, "category": ticket.category,
                        "priority": ticket.priority})
    logger.info("Ticket %s opened on site %s by %s", ticket.pk, site.pk, user.pk)
    return ticket


@transaction.atomic
def update_ticket(ticket, user, status=None, priority=None, assigned_to=None,
                  resolution_notes=None):
    """
    Move a ticket along. resolved_at is stamped when it reaches resolved/closed
    and cleared when it is reopened.
    """
    site = ticket.site
    if not can_manage_tickets(user, site):
        raise PermissionDenied("Only site managers can update tickets")
    ticket = SupportTicket.objects.select_for_update().get(pk=ticket.pk)
    before = {"status": ticket.status, "priority": ticket.priority,
              "assigned_to": ticket.assigned_to_id}

    if assigned_to is not None:
        if not SiteMembership.objects.filter(
                site=site, user=assigned_to, is_active=True).exists() and not assigned_to.is_superuser:
            raise ValidationError("Tickets can only be assigned to members of the site.")
        ticket.assigned_to = assigned_to
    if priority is not None:
        ticket.priority = priority
    if resolution_notes is not None:
        ticket.resolution_notes = resolution_notes
    if status is not None and status != ticket.status:
        ticket.status = status
        if status in DONE_STATUSES:
            ticket.resolved_at = ticket.resolved_at or timezone.now()
        else:
            ticket.resolved_at = None
    ticket.save()

    log_action(action="update", instance=ticket, user=user, site=site,
               changes={"before": before,
                        "after": {"status": ticket.status, "priority": ticket.priority,
                                  "assigned_to": ticket.assigned_to_id}})
    return ticket
