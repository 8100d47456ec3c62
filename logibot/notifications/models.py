from django.db import models


class Notification(models.Model):
    """Operational notification shown in the notification feed"""
    TYPE_CHOICES = [
        ('stock_change', 'Stock Change'),
        ('urgent_order', 'Urgent Order'),
        ('order_status', 'Order Status'),
        ('low_stock', 'Low Stock'),
        ('system', 'System'),
    ]
    SEVERITY_CHOICES = [
        ('info', 'Info'),
        ('warning', 'Warning'),
        ('critical', 'Critical'),
    ]

    title = models.CharField(max_length=200)
    message = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='system')
    severity = models.CharField(max_length=10, choices=SEVERITY_CHOICES, default='info')
    read = models.BooleanField(default=False)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    def __str__(self):
        return f"[{self.severity}] {self.title}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['read'], name='idx_notification_read'),
        ]
