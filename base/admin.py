from django.db import models

from unfold.admin import ModelAdmin
from unfold.contrib.forms.widgets import WysiwygWidget


class BaseAdminClass(ModelAdmin):
    compressed_fields = True
    warn_unsaved_form = True
    list_filter_submit = False
    list_fullwidth = False
    list_filter_sheet = True
    list_horizontal_scrollbar_top = False
    list_disable_select_all = False
    change_form_show_cancel_button = True
    list_per_page = 10
    list_max_show_all = 100

    formfield_overrides = {
        models.TextField: {
            "widget": WysiwygWidget,
        },
    }
