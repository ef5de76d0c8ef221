from loguru import logger

from tonmanage.log import setup_logger


def test_file_sink(tmp_path):
    log_file = tmp_path / 'tonmanage.log'
    setup_logger('INFO', str(log_file))
    try:
        logger.debug('debug goes to the file only')
        logger.info('wallet is ready')
    finally:
        logger.remove()

    content = log_file.read_text()
    assert 'wallet is ready' in content
    assert 'debug goes to the file only' in content


def test_console_format(capsys):
    setup_logger('INFO')
    try:
        logger.debug('hidden')
        logger.info('shown')
    finally:
        logger.remove()

    err = capsys.readouterr().err
    assert '- INFO shown' in err
    assert err.startswith('> ')
    assert 'hidden' not in err
