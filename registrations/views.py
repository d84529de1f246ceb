"""
Registration views for the Funrun backend.

Provides API endpoints for:
- Public individual and group submissions
- Roster template download and parsing
- Admin review: list, detail, approve/reject, delete
- Statistics, participant master list and exports
- Dashboard and monitor page summaries behind the access gate
"""

import logging

from django.conf import settings
from django.db.models import Count
from django.http import HttpResponse
from rest_framework import generics, status, views
from rest_framework.permissions import AllowAny

from authentication.permissions import HasAdminSession, IsMainAdmin, IsRegistrationManager, get_session
from core.models import FieldOffice
from core.responses import success_response
from core.throttling import RegistrationSubmitThrottle
from .exports import (
    XLSX_CONTENT_TYPE,
    export_group_participants_csv,
    export_individuals_csv,
    export_master_list_xlsx,
)
from .filters import GroupRegistrationFilter, IndividualRegistrationFilter
from .models import GroupRegistration, IndividualRegistration, RegistrationType
from .serializers import (
    GroupRegistrationDetailSerializer,
    GroupRegistrationSerializer,
    GroupSubmitSerializer,
    IndividualRegistrationSerializer,
    IndividualSubmitSerializer,
    RosterUploadSerializer,
    StatusTransitionSerializer,
)
from .services import (
    RegistrationWorkflow,
    office_breakdown,
    participant_master_list,
    registration_statistics,
)
from .spreadsheets import generate_roster_template, parse_roster_workbook, template_filename

logger = logging.getLogger('funrun.registrations')


class OfficeScopedQuerysetMixin:
    """Restrict querysets to the session's field office for field admins."""

    def scope_queryset(self, queryset):
        session = get_session(self.request)
        if session is not None and session.office_scope is not None:
            queryset = queryset.filter(field_office_id=session.office_scope)
        return queryset


class PublicSubmitMixin:
    """Anyone may POST (rate limited); other methods need an admin session."""

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return super().get_permissions()

    def get_throttles(self):
        if self.request.method == 'POST':
            return [RegistrationSubmitThrottle()]
        return super().get_throttles()


# =============================================================================
# INDIVIDUAL
# =============================================================================

class IndividualRegistrationListCreateView(PublicSubmitMixin, OfficeScopedQuerysetMixin, generics.ListAPIView):
    """
    List or submit individual registrations.

    GET /api/v1/registrations/individual/
    Query parameters: status, field_office, search, ordering

    POST /api/v1/registrations/individual/ (multipart, public)
    Fields: full_name, age, gender, contact_number, email, address,
    field_office (code or id), receipt (PDF/JPEG/PNG, max 5 MB)
    """

    permission_classes = [HasAdminSession]
    serializer_class = IndividualRegistrationSerializer
    filterset_class = IndividualRegistrationFilter
    ordering_fields = ['submitted_at', 'full_name', 'status', 'age']
    ordering = ['-submitted_at']

    def get_queryset(self):
        return self.scope_queryset(
            IndividualRegistration.objects.select_related('field_office')
        )

    def post(self, request):
        serializer = IndividualSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        record = RegistrationWorkflow.submit_individual(
            field_office=data.pop('field_office'),
            receipt=data.pop('receipt'),
            **data
        )
        return success_response(
            IndividualRegistrationSerializer(record, context={'request': request}).data,
            message='Registration submitted successfully',
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# GROUP
# =============================================================================

class GroupRegistrationListCreateView(PublicSubmitMixin, OfficeScopedQuerysetMixin, generics.ListAPIView):
    """
    List or submit group registrations.

    GET /api/v1/registrations/group/
    Query parameters: status, field_office, search, ordering

    POST /api/v1/registrations/group/ (multipart, public)
    Fields: agency_name, contact_person, contact_number, contact_email,
    field_office, participants (JSON list), receipt, excel_file (optional)
    """

    permission_classes = [HasAdminSession]
    serializer_class = GroupRegistrationSerializer
    filterset_class = GroupRegistrationFilter
    ordering_fields = ['submitted_at', 'agency_name', 'status']
    ordering = ['-submitted_at']

    def get_queryset(self):
        return self.scope_queryset(
            GroupRegistration.objects.select_related('field_office')
            .annotate(participant_count=Count('participants'))
        )

    def post(self, request):
        serializer = GroupSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        group = RegistrationWorkflow.submit_group(
            field_office=data.pop('field_office'),
            participants=data.pop('participants'),
            receipt=data.pop('receipt'),
            excel_file=data.pop('excel_file', None),
            **data
        )
        return success_response(
            GroupRegistrationDetailSerializer(group, context={'request': request}).data,
            message='Group registration submitted successfully',
            status=status.HTTP_201_CREATED,
        )


class RosterTemplateView(views.APIView):
    """
    Download the blank group roster workbook.

    GET /api/v1/registrations/group/template/?field_office=<code or id>
    """

    permission_classes = [AllowAny]

    def get(self, request):
        office = FieldOffice.resolve(request.query_params.get('field_office'))
        office_name = office.name if office else 'Field Office'

        response = HttpResponse(generate_roster_template(office_name), content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{template_filename(office_name)}"'
        return response


class RosterParseView(views.APIView):
    """
    Parse a filled-in roster workbook.

    POST /api/v1/registrations/group/parse/ (multipart: file)

    Returns the organization details and participants, or 400 with the
    first problem found.
    """

    permission_classes = [AllowAny]
    throttle_classes = [RegistrationSubmitThrottle]

    def post(self, request):
        serializer = RosterUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        roster = parse_roster_workbook(serializer.validated_data['file'])
        return success_response(roster.to_dict())


class GroupReconcileView(views.APIView):
    """
    Re-apply approved group OR numbers to participants.

    POST /api/v1/registrations/group/reconcile/ (main admin)
    Optional body: {"group_id": "<uuid>"}
    """

    permission_classes = [IsMainAdmin]

    def post(self, request):
        group_id = request.data.get('group_id') or None
        if group_id is not None:
            group_id = RegistrationWorkflow.get_registration(group_id, RegistrationType.GROUP).pk

        updated = RegistrationWorkflow.reconcile_participant_or_numbers(group_id=group_id)
        return success_response(
            {'participants_updated': updated},
            message=f'Reconciled {updated} participant OR numbers.',
        )


# =============================================================================
# REVIEW ACTIONS
# =============================================================================

DETAIL_SERIALIZERS = {
    RegistrationType.INDIVIDUAL: IndividualRegistrationSerializer,
    RegistrationType.GROUP: GroupRegistrationDetailSerializer,
}


class RegistrationDetailView(views.APIView):
    """
    Retrieve or delete a registration.

    GET /api/v1/registrations/{individual|group}/{id}/
    DELETE /api/v1/registrations/{individual|group}/{id}/

    Deletion is permanent; group participants and stored files go too.
    """

    permission_classes = [IsRegistrationManager]

    def get(self, request, registration_type, pk):
        record = RegistrationWorkflow.get_registration(pk, registration_type, session=request.auth)
        serializer_class = DETAIL_SERIALIZERS[registration_type]
        return success_response(serializer_class(record, context={'request': request}).data)

    def delete(self, request, registration_type, pk):
        participants_deleted = RegistrationWorkflow.delete(pk, registration_type, session=request.auth)
        return success_response(
            {'id': str(pk), 'participants_deleted': participants_deleted},
            message='Registration deleted.',
        )


class RegistrationStatusView(views.APIView):
    """
    Approve or reject a pending registration.

    POST /api/v1/registrations/{individual|group}/{id}/status/

    Request:
    {
        "status": "approved" | "rejected",
        "or_number": "12345678"   // required when approving
    }

    409 if the registration was already approved or rejected.
    """

    permission_classes = [IsRegistrationManager]

    def post(self, request, registration_type, pk):
        serializer = StatusTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        record = RegistrationWorkflow.transition(
            pk,
            serializer.validated_data['status'],
            registration_type,
            or_number=serializer.validated_data.get('or_number'),
            session=request.auth,
        )
        serializer_class = DETAIL_SERIALIZERS[registration_type]
        return success_response(
            serializer_class(record, context={'request': request}).data,
            message=f'Registration {record.status}.',
        )


# =============================================================================
# STATISTICS, MASTER LIST, EXPORTS
# =============================================================================

class StatisticsView(views.APIView):
    """
    Registration counts by status.

    GET /api/v1/registrations/stats/

    Field admins get their own office. Main admin and RD/ARD get the
    overall totals plus a per-office breakdown.
    """

    def get(self, request):
        session = request.auth
        data = {
            'field_office_id': session.office_scope,
            'stats': registration_statistics(session.office_scope),
        }
        if session.can_view_all_offices:
            data['offices'] = office_breakdown()
        return success_response(data)


class MasterListMixin:

    def get_entries(self):
        session = self.request.auth
        params = self.request.query_params

        field_office_id = session.office_scope
        if field_office_id is None and params.get('field_office'):
            try:
                field_office_id = int(params['field_office'])
            except ValueError:
                field_office_id = None

        source = params.get('source')
        if source not in RegistrationType.ALL:
            source = None

        return participant_master_list(
            field_office_id=field_office_id,
            source=source,
            search=params.get('search') or None,
            descending=params.get('sort') == 'desc',
        )


class MasterListView(MasterListMixin, views.APIView):
    """
    Participant master list (individual registrations + group participants).

    GET /api/v1/registrations/participants/
    Query parameters: source (individual|group), search, sort (asc|desc),
    field_office (main admin / RD/ARD only)
    """

    def get(self, request):
        entries = self.get_entries()
        return success_response({'count': len(entries), 'results': entries})


class MasterListExportView(MasterListMixin, views.APIView):
    """
    GET /api/v1/registrations/participants/export/ -> xlsx
    """

    def get(self, request):
        return export_master_list_xlsx(self.get_entries())


class IndividualExportView(OfficeScopedQuerysetMixin, generics.GenericAPIView):
    """
    GET /api/v1/registrations/individual/export/ -> CSV

    Accepts the same filters as the individual list.
    """

    filterset_class = IndividualRegistrationFilter
    ordering_fields = ['submitted_at', 'full_name', 'status', 'age']
    ordering = ['-submitted_at']

    def get_queryset(self):
        return self.scope_queryset(
            IndividualRegistration.objects.select_related('field_office')
        )

    def get(self, request):
        return export_individuals_csv(self.filter_queryset(self.get_queryset()))


class GroupExportView(OfficeScopedQuerysetMixin, generics.GenericAPIView):
    """
    GET /api/v1/registrations/group/export/ -> CSV of group participants

    Accepts the same filters as the group list.
    """

    filterset_class = GroupRegistrationFilter
    ordering_fields = ['submitted_at', 'agency_name', 'status']
    ordering = ['-submitted_at']

    def get_queryset(self):
        return self.scope_queryset(
            GroupRegistration.objects.select_related('field_office')
            .prefetch_related('participants')
        )

    def get(self, request):
        return export_group_participants_csv(self.filter_queryset(self.get_queryset()))


# =============================================================================
# GATED PAGES
# =============================================================================

class AdminDashboardView(views.APIView):
    """
    Admin dashboard summary.

    GET /admin/dashboard/

    Served behind the access gate; RD/ARD sessions are redirected to the
    monitor page before reaching this view.
    """

    def get(self, request):
        session = request.auth
        office = FieldOffice.objects.filter(pk=session.field_office_id).first()
        data = {
            'event': settings.FUNRUN_EVENT_NAME,
            'role': session.role,
            'field_office': {
                'id': session.field_office_id,
                'name': office.name if office else None,
            },
            'stats': registration_statistics(session.office_scope),
        }
        if session.is_main_admin:
            data['offices'] = office_breakdown()
        return success_response(data)


class MonitorView(views.APIView):
    """
    RD/ARD monitoring summary.

    GET /monitor/

    Read-only overview across all field offices.
    """

    def get(self, request):
        return success_response({
            'event': settings.FUNRUN_EVENT_NAME,
            'role': request.auth.role,
            'stats': registration_statistics(),
            'offices': office_breakdown(),
        })
