from django.contrib import admin

from .models import DonorProfile, Donation, DonorBadge
from .utils import award_badges_quietly, complete_donation


@admin.register(DonorProfile)
class DonorProfileAdmin(admin.ModelAdmin):
    list_display   = ['full_name', 'blood_type', 'phone', 'completed_donations', 'badge_count', 'is_active_display']
    list_filter    = ['blood_type', 'user__is_active']
    search_fields  = ['full_name', 'user__username', 'user__email', 'phone']
    ordering       = ['full_name']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Personal Info', {
            'fields': ('user', 'full_name', 'phone', 'blood_type', 'address')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(boolean=True, description='Active')
    def is_active_display(self, obj):
        return obj.is_active

    @admin.display(description='Donations')
    def completed_donations(self, obj):
        return obj.donations.filter(status='completed').count()

    @admin.display(description='Badges')
    def badge_count(self, obj):
        return obj.badges.count()

    # Admin action: award badges missed earlier (e.g. after a data import)
    actions = ['recompute_badges']

    @admin.action(description='Recompute badges for selected donors')
    def recompute_badges(self, request, queryset):
        awarded = 0
        for donor in queryset:
            awarded += len(award_badges_quietly(donor))
        self.message_user(request, f'Awarded {awarded} new badge(s) to {queryset.count()} donor(s).')


@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display  = ['donor', 'hospital', 'date', 'blood_type', 'units', 'impact', 'status']
    list_filter   = ['status', 'blood_type', 'date']
    search_fields = ['donor__full_name', 'hospital__hospital_name']
    ordering      = ['-date']
    readonly_fields = ['impact', 'created_at', 'updated_at']

    actions = ['mark_completed']

    @admin.action(description='Mark selected donations as completed')
    def mark_completed(self, request, queryset):
        pending = queryset.exclude(status='completed').select_related('donor', 'hospital')
        count = 0
        for donation in pending:
            complete_donation(donation)
            count += 1
        self.message_user(request, f'{count} donation(s) marked as completed.')


@admin.register(DonorBadge)
class DonorBadgeAdmin(admin.ModelAdmin):
    list_display  = ['donor', 'badge_key', 'earned_at']
    list_filter   = ['badge_key']
    search_fields = ['donor__full_name']
    ordering      = ['-earned_at']
    readonly_fields = ['earned_at']
