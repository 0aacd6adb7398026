"""
External services: Supabase client factory and the Realtime channel.
"""
