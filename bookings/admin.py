from django.contrib import admin
from .models import Client, DJProfile, Gig, Invoice


@admin.register(DJProfile)
class DJProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'stage_name', 'business_name')
    search_fields = ('user__email', 'stage_name', 'business_name')


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'type', 'user', 'created_at')
    search_fields = ('name', 'email')
    list_filter = ('type',)


@admin.register(Gig)
class GigAdmin(admin.ModelAdmin):
    list_display = ('title', 'date', 'client', 'fee', 'user')
    search_fields = ('title', 'location', 'client__name')
    list_filter = ('date',)


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'client', 'status', 'amount', 'due_date', 'user')
    list_filter = ('status',)
    search_fields = ('invoice_number', 'client__name')
