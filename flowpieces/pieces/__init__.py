"""
Bundled pieces.

- kommo: Kommo CRM (leads, contacts, companies, webhook triggers)
- zagomail: Zagomail email marketing (subscribers, campaigns, webhook triggers)
"""
