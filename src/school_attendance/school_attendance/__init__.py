"""School Attendance package.

Feature modules (users, students, attendance, reports, notifications) each
carry a domain model, a repository protocol with its MySQL implementation, a
service layer holding the use cases and a thin Flask controller.
"""
