# hospitals/admin.py
from django.contrib import admin
from django.utils.html import format_html

from .models import BloodRequest, HospitalProfile, HospitalDonorMembership, InvalidStatusTransition


URGENCY_COLORS = {
    'critical': 'red',
    'urgent': 'orange',
    'normal': 'gray',
}


@admin.register(BloodRequest)
class BloodRequestAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'hospital_name',
        'blood_type',
        'units_needed',
        'urgency_badge',
        'status',
        'notified',
        'expiry_date',
    ]
    list_filter = ['status', 'urgency', 'blood_type', 'created_at']
    search_fields = ['hospital_name', 'contact_person', 'patient_condition']
    readonly_fields = ['hospital_name', 'location', 'created_at', 'updated_at']

    fieldsets = (
        ('Request Information', {
            'fields': ('hospital', 'hospital_name', 'location', 'blood_type',
                       'units_needed', 'urgency', 'patient_condition', 'additional_notes')
        }),
        ('Contact', {
            'fields': ('contact_person', 'contact_phone')
        }),
        ('Lifecycle', {
            'fields': ('status', 'expiry_date')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Urgency')
    def urgency_badge(self, obj):
        return format_html(
            '<strong style="color: {};">{}</strong>',
            URGENCY_COLORS.get(obj.urgency, 'gray'),
            obj.get_urgency_display(),
        )

    @admin.display(description='Notified')
    def notified(self, obj):
        sms = obj.sms_logs.filter(status='sent').count()
        return format_html(
            '<span style="color: blue;">In-app: {}</span> | '
            '<span style="color: green;">SMS: {}</span>',
            obj.notifications.count(), sms,
        )

    actions = ['mark_fulfilled', 'mark_expired']

    def _transition(self, request, queryset, new_status):
        moved = 0
        for blood_request in queryset:
            try:
                blood_request.transition_to(new_status)
                moved += 1
            except InvalidStatusTransition:
                continue
        self.message_user(request, f'{moved} request(s) marked as {new_status}.')

    @admin.action(description='Mark selected requests as fulfilled')
    def mark_fulfilled(self, request, queryset):
        self._transition(request, queryset, 'fulfilled')

    @admin.action(description='Mark selected requests as expired')
    def mark_expired(self, request, queryset):
        self._transition(request, queryset, 'expired')


@admin.register(HospitalProfile)
class HospitalProfileAdmin(admin.ModelAdmin):
    list_display = ['hospital_name', 'user', 'phone', 'is_verified', 'created_at']
    list_filter = ['is_verified']
    search_fields = ['hospital_name', 'user__email', 'license_number']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(HospitalDonorMembership)
class HospitalDonorMembershipAdmin(admin.ModelAdmin):
    list_display = ['hospital', 'donor', 'consented', 'consented_at']
    list_filter = ['consented']
    search_fields = ['hospital__hospital_name', 'donor__full_name']
