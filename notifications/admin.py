from django.contrib import admin

from .models import Notification, SmsLog


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display  = ['user', 'kind', 'title', 'blood_request', 'is_read', 'created_at']
    list_filter   = ['kind', 'is_read']
    search_fields = ['user__username', 'title']
    ordering      = ['-created_at']


@admin.register(SmsLog)
class SmsLogAdmin(admin.ModelAdmin):
    list_display  = ['phone_number', 'status', 'provider', 'blood_request', 'created_at']
    list_filter   = ['status', 'provider']
    search_fields = ['phone_number', 'provider_message_id']
    readonly_fields = [f.name for f in SmsLog._meta.fields]
    ordering      = ['-created_at']
