from django.contrib import admin

from ebooks.models import CartItem, Customer, Ebook, Purchase


class PurchaseInline(admin.TabularInline):
    model = Purchase
    extra = 0


@admin.register(Ebook)
class EbookAdmin(admin.ModelAdmin):
    list_display = ["title", "author", "category", "price", "created_at"]
    search_fields = ["title", "author"]
    list_filter = ["category"]


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "has_access", "created_at"]
    search_fields = ["email", "name"]
    list_filter = ["has_access"]
    inlines = [PurchaseInline]


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ["customer", "ebook", "added_at"]
