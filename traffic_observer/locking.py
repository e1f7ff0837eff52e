"""
Lock de leitura/escrita do ObservationConfig
Verificações e deserializações leem em paralelo; registros e reset escrevem sozinhos
"""
import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Lock de leitura/escrita com preferência para escritores.

    Assim que um escritor está esperando, novas leituras de outras
    threads bloqueiam até ele terminar. Uma thread que já segura a
    leitura pode ler de novo sem esperar, senão ela ficaria presa atrás
    do escritor que espera por ela.

    A escrita não é reentrante: pedir a escrita segurando a leitura ou
    a própria escrita lança RuntimeError em vez de travar o processo.
    """

    def __init__(self) -> None:
        self._readers = 0
        self._writers_waiting = 0
        self._writer = None
        self._cond = threading.Condition(threading.Lock())
        self._local = threading.local()

    def _read_depth(self) -> int:
        return getattr(self._local, "depth", 0)

    @contextmanager
    def read(self) -> Iterator[None]:
        """Adquire o lock de leitura"""
        reentrant = self._read_depth() > 0
        with self._cond:
            if self._writer == threading.get_ident():
                raise RuntimeError("Leitura pedida por thread que segura a escrita")
            while not reentrant and (self._writer is not None or self._writers_waiting > 0):
                self._cond.wait()
            self._readers += 1
        self._local.depth = self._read_depth() + 1
        try:
            yield
        finally:
            self._local.depth -= 1
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Adquire o lock de escrita exclusivo"""
        if self._read_depth() > 0:
            raise RuntimeError("Escrita pedida por thread que segura a leitura")

        with self._cond:
            if self._writer == threading.get_ident():
                raise RuntimeError("Lock de escrita não é reentrante")
            self._writers_waiting += 1
            while self._writer is not None or self._readers > 0:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = threading.get_ident()
        try:
            yield
        finally:
            with self._cond:
                self._writer = None
                self._cond.notify_all()
