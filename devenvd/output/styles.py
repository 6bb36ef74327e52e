class Style:
    regular = 'default'
    context = 'grey50'
    info = 'bold cyan'
    good = 'green'
    bad = 'red'
    suspicious = 'yellow'
    mark = 'bold magenta'
    mark_neutral = 'bold blue'
