from raggate.main import serve

serve()
